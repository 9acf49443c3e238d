"""genflow: Kie.ai generation task orchestration.

Creates image and video generation tasks on Kie.ai-hosted models, polls them
to completion in the background and exposes the persisted results over HTTP.
"""

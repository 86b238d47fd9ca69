from codepipeline_action import create_action

from json_passthrough_service import JsonPassthroughService

service = JsonPassthroughService()

# Lambda entrypoint: configure the function handler as `handler.handle`.
handle = create_action(service.transform)

"""
decoroute example: Hello World
================================

Run:   python examples/hello_world.py
Try:   curl localhost:3000/hello/
       curl localhost:3000/hello/Ann
       curl -X POST -H 'Content-Type: application/json' -d '{"x": 1}' localhost:3000/hello/
"""

import logging

from fastapi import Request

from decoroute import Server, controller, get, post
from decoroute.middleware import json_body, log_requests, request_id

logger = logging.getLogger("hello_world")


@controller("/hello")
class HelloWorldController:
    @get("/")
    async def get_greeting(self):
        return {"message": "Hello World!"}

    # {name:path} also matches the empty segment, which only reaches this
    # handler when no index route answers it first
    @get("/{name:path}")
    async def get_greeting_with_name(self, name: str):
        if name == "":
            name = "Anonymous"
        return {"message": f"Hello {name}!"}

    @post("/")
    async def post_greeting(self, request: Request):
        return request.state.body


PORT = 3000

server = Server(
    PORT,
    middlewares=[request_id, log_requests, json_body],
    controllers=[HelloWorldController],
)


if __name__ == "__main__":
    server.listen(lambda: logger.info("Server listening on port %d", PORT))

"""
Basic REST client example using rest_core.

This example demonstrates callback-style requests with RestClient and
awaitable requests with RxRestClient against httpbin.org.
"""

import asyncio
import logging
from typing import Any, Dict

from pydantic import BaseModel, Field

from rest_core import (
    H11Transport,
    RestClient,
    RestClientOptions,
    RestCoreError,
    RxRestClient,
    default_converters,
)
from rest_core.network import AsyncioNetworkBackend

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class HttpBinEcho(BaseModel):
    """Subset of httpbin's echo payload."""
    url: str
    headers: Dict[str, str]
    payload: Any = Field(None, alias="json")


def create_client() -> RestClient:
    transport = H11Transport(AsyncioNetworkBackend(), "httpbin.org", 80)
    options = RestClientOptions(request_timeout=10.0)
    return RestClient(transport, default_converters(), options=options)


async def callback_get_request():
    """Demonstrate a GET request with handler callbacks."""
    logger.info("Making callback GET request...")

    client = create_client()
    done = asyncio.get_running_loop().create_future()

    def on_response(response):
        logger.info(f"Response status: {response.status_code}")
        logger.info(f"Echoed url: {response.body.url}")
        done.set_result(None)

    def on_error(error):
        logger.error(f"Request failed: {error}")
        done.set_result(None)

    request = client.get("/get", HttpBinEcho, on_response)
    request.exception_handler(on_error)
    request.end()
    await done


async def awaitable_post_request():
    """Demonstrate a JSON POST request awaited through RxRestClient."""
    logger.info("Making awaitable POST request...")

    rx_client = RxRestClient(create_client())

    def send_message(request):
        request.set_content_type("application/json")
        request.end({"message": "Hello, World!"})

    response = await rx_client.post("/post", HttpBinEcho, send_message)
    logger.info(f"Response status: {response.status_code}")
    logger.info(f"Echoed body: {response.body.payload}")


async def error_status_demo():
    """Demonstrate how error statuses surface."""
    logger.info("Requesting a 418 status...")

    rx_client = RxRestClient(create_client())
    try:
        await rx_client.get("/status/418", str)
    except RestCoreError as e:
        logger.info(f"Got expected error: {e}")


async def main():
    """Run all examples."""
    logger.info("Starting REST client examples...")

    await callback_get_request()
    await awaitable_post_request()
    await error_status_demo()

    logger.info("All examples completed successfully!")


if __name__ == "__main__":
    asyncio.run(main())

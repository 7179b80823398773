"""Basic usage examples for the Hoodie Python SDK."""

import asyncio
import logging

from hoodie import HoodieClient
from hoodie import HoodieRequestError


class Account:
    """Toy extension: keeps track of the signed-in user."""

    def __init__(self, hoodie):
        self.hoodie = hoodie
        self.username = None
        hoodie.on("reconnected", self.refresh)
        hoodie.on("dispose", self.forget)

    async def refresh(self):
        try:
            session = await self.hoodie.request("GET", "/_session")
        except HoodieRequestError as e:
            print(f"Could not refresh session: {e.payload}")
            return
        self.username = session.get("userCtx", {}).get("name")

    def forget(self):
        self.username = None


HoodieClient.register("account", Account)


async def main():
    """Connect, watch the connection and talk to the server."""
    logging.basicConfig(level=logging.INFO)

    async with HoodieClient("http://localhost:6001/_api") as hoodie:
        hoodie.on("disconnected", lambda: print("Server went away, checking every 3s"))
        hoodie.on("reconnected", lambda: print("Server is back"))

        print(f"Online: {hoodie.online}")

        try:
            doc = await hoodie.request("GET", "/user_database/doc_id")
            print(f"Document: {doc}")
        except HoodieRequestError as e:
            # always a structured error, even if the server is down
            print(f"Request failed: {e.payload}")

        notes = hoodie.open("notes")
        try:
            print(f"Notes: {await notes.find_all()}")
        except HoodieRequestError as e:
            print(f"Could not list notes: {e.payload}")

        await asyncio.sleep(60)


if __name__ == "__main__":
    asyncio.run(main())

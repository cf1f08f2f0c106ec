"""Main entry point for the RAGWeave server."""

import asyncio
import sys

from ragweave import RagWeaveServer, Settings


async def main() -> None:
    """Main entry point."""
    try:
        settings = Settings()

        server = RagWeaveServer(settings)
        await server.start()

    except KeyboardInterrupt:
        print("\nServer stopped by user")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())

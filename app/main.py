import uvicorn

from server import server

server_app = server.handler


def main():
    """Serve the API with uvicorn."""
    uvicorn.run(server_app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()

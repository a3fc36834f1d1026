import uvicorn

from app.core.config import settings


def main() -> None:
  """Serve the application on the configured host and port."""

  uvicorn.run(
    "app.main:app",
    host=settings.http.HTTP_HOST,
    port=settings.http.HTTP_PORT,
  )


if __name__ == "__main__":
  main()

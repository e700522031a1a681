"""Run the API with uvicorn: ``python -m reddit_notion``."""

import uvicorn

from reddit_notion.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("reddit_notion.app:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()

import uvicorn

from contactbook.application import create_app
from contactbook.config import get_settings

app = create_app()

# Dev entry point
if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run("main:app", host=settings.host, port=settings.port, reload=True)

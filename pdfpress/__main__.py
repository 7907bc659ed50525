import uvicorn

from pdfpress.core.config import settings


def main():
    uvicorn.run("pdfpress.api.main:app", host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()

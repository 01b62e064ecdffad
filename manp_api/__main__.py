import uvicorn

from manp_api.core.config import settings


def main():
    uvicorn.run("manp_api.main:app", host=settings.HOST, port=settings.PORT, reload=False)


if __name__ == "__main__":
    main()

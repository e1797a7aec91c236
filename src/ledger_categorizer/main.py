import uvicorn

from ledger_categorizer.app import create_app
from ledger_categorizer.core import settings
from ledger_categorizer.logger import get_logging_config

app = create_app()


def run() -> None:
    uvicorn.run(
        "ledger_categorizer.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_config=get_logging_config(),
    )


if __name__ == "__main__":
    run()

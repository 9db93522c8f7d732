import logging

from optica.infra.db import engine
from optica.infra.models import Base

logger = logging.getLogger(__name__)


def main():
    logging.basicConfig(level=logging.INFO)
    Base.metadata.create_all(bind=engine)
    logger.info("Tabelas criadas!")


if __name__ == "__main__":
    main()

from dependency_injector import containers, providers

from liveshop.core.config import configs
from liveshop.core.database import Database


class Container(containers.DeclarativeContainer):
    wiring_config = containers.WiringConfiguration(
        modules=[
            "liveshop.core.db",
        ]
    )

    config = providers.Object(configs)

    db = providers.Singleton(
        Database,
        db_url=configs.DATABASE_URL,
        echo=configs.DB_ECHO,
    )

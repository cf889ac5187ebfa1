"""
Container d'injection de dependances via dependency-injector.

Fournit une gestion centralisee des dependances pour les interfaces CLI et Web :
configuration, base de donnees, repositories SQLModel, cache adresse par
contenu, lecture des medias et services d'assets (decouverte, selection,
publication).
"""

from dependency_injector import containers, providers
from sqlmodel import Session

from .adapters.api.asset_downloader import HttpAssetDownloader
from .adapters.probing import MediaInfoVideoProbe, PillowImageProbe
from .config import Settings
from .infrastructure.persistence.database import create_db_engine, init_db
from .infrastructure.persistence.repositories import (
    SQLModelAssetCandidateRepository,
    SQLModelAssetSlotRepository,
    SQLModelCacheEntryRepository,
    SQLModelScanStateRepository,
    SQLModelSettingsRepository,
)
from .infrastructure.storage import FileSystemContentStore
from .services.asset_discovery import AssetDiscoveryService
from .services.asset_limits import AssetLimitService
from .services.asset_publishing import AssetPublishingService
from .services.asset_selection import AssetSelectionService


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        container.database.init()  # Cree les tables une fois
        discovery = container.discovery_service()
        result = discovery.discover(EntityType.MOVIE, 12, Path("/films/Alien"))
    """

    # Configuration - singleton charge une seule fois
    config = providers.Singleton(Settings)

    # Engine partage, tables creees par la ressource database
    engine = providers.Singleton(create_db_engine, database_url=config.provided.database_url)
    database = providers.Resource(init_db, engine=engine)

    # Session factory - nouvelle session a chaque appel
    session = providers.Factory(Session, engine)

    # Repositories - Factory pour nouvelle instance avec session fraiche
    candidate_repository = providers.Factory(SQLModelAssetCandidateRepository, session=session)
    slot_repository = providers.Factory(SQLModelAssetSlotRepository, session=session)
    cache_entry_repository = providers.Factory(SQLModelCacheEntryRepository, session=session)
    settings_repository = providers.Factory(SQLModelSettingsRepository, session=session)
    scan_state_repository = providers.Factory(SQLModelScanStateRepository, session=session)

    # Adapters - implementations concretes des ports
    content_store = providers.Singleton(
        FileSystemContentStore,
        cache_root=config.provided.cache_dir,
        public_prefix=config.provided.public_cache_prefix,
    )
    image_probe = providers.Singleton(PillowImageProbe)
    video_probe = providers.Singleton(MediaInfoVideoProbe)

    # Telechargeur - Singleton pour partager le client HTTP
    asset_downloader = providers.Singleton(
        HttpAssetDownloader,
        timeout=config.provided.download_timeout,
        max_attempts=config.provided.download_max_attempts,
    )

    # Services dependant de repositories (sessions fraiches)
    limit_service = providers.Factory(AssetLimitService, settings_repo=settings_repository)

    selection_service = providers.Factory(
        AssetSelectionService,
        candidate_repo=candidate_repository,
        slot_repo=slot_repository,
        cache_repo=cache_entry_repository,
        content_store=content_store,
        image_probe=image_probe,
        downloader=asset_downloader,
        limit_service=limit_service,
        max_retries=config.provided.selection_max_retries,
    )

    discovery_service = providers.Factory(
        AssetDiscoveryService,
        candidate_repo=candidate_repository,
        cache_repo=cache_entry_repository,
        scan_state_repo=scan_state_repository,
        content_store=content_store,
        image_probe=image_probe,
        video_probe=video_probe,
        selection_service=selection_service,
        scan_workers=config.provided.scan_workers,
    )

    publishing_service = providers.Factory(
        AssetPublishingService,
        candidate_repo=candidate_repository,
    )

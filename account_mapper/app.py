from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from account_mapper import __version__
from account_mapper.application import build_engine, configure_mapping_engine, get_mapping_engine
from account_mapper.core.settings import Settings
from account_mapper.infrastructure import FileKeyValueStore, InMemoryKeyValueStore, PersistenceGateway
from account_mapper.routes import catalog, mapping


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    app = FastAPI(title="Account Mapper API", version=__version__)

    if settings.storage_root is not None:
        store = FileKeyValueStore(settings.storage_root, max_bytes=settings.storage_max_bytes)
    else:
        store = InMemoryKeyValueStore(max_bytes=settings.storage_max_bytes)
    configure_mapping_engine(build_engine(gateway=PersistenceGateway(store), undo_depth=settings.undo_depth))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(catalog.router, prefix="/api")
    app.include_router(mapping.router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        engine = get_mapping_engine()
        active = engine.active_category
        return JSONResponse(
            {
                "message": "Account Mapper API",
                "version": __version__,
                "active_category": active.value if active else None,
                "categories": [category.value for category in engine.catalog.categories()],
            }
        )

    return app


app = create_app()

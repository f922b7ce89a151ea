"""
HTTP front for the sunmeadow ledger and meadow layout (FastAPI).

Routes:
- GET    /entries          newest-first history (`?limit=`, default from config)
- POST   /entries          add `{value}`; 422 with `{reason, message}` on bad input
- DELETE /entries/{id}     remove one entry (admin)
- DELETE /entries          clear the ledger (admin)
- GET    /total            live total and element count
- GET    /meadow           flower layout for the current total

Admin routes require the `X-Admin-Secret` header to match
`SUNMEADOW_ADMIN_SECRET`; a missing or wrong secret gets 403. Mutations that
could not be persisted still succeed and carry `flush_warning`.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional, Union

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from pydantic import BaseModel

from sunmeadow.auth.admin import AdminGate
from sunmeadow.config.loader import Settings, load_settings
from sunmeadow.input.validator import EntryValidationError, validate_entry_input
from sunmeadow.layout.generator import generate_layout
from sunmeadow.ledger.store import LedgerStore
from sunmeadow.main import open_store
from sunmeadow.metrics.core import start_server_safe
from sunmeadow.metrics.ledger import set_meadow_counts


class EntryIn(BaseModel):
    value: Union[int, float, str]


def _entry_out(store: LedgerStore, entry) -> dict:
    return {
        **entry.to_record(),
        "total": store.live_total(),
        "flush_warning": store.last_flush_error,
    }


def create_app(store: Optional[LedgerStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the API. The store is opened lazily on first request unless given."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        start_server_safe(get_settings_from(app).prometheus_port)
        yield

    app = FastAPI(title="Sunmeadow API", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store

    def get_settings(request: Request) -> Settings:
        return get_settings_from(request.app)

    def get_store(request: Request) -> LedgerStore:
        if request.app.state.store is None:
            request.app.state.store = open_store(get_settings_from(request.app))
        return request.app.state.store

    def require_admin(
        x_admin_secret: Optional[str] = Header(default=None),
        cfg: Settings = Depends(get_settings),
    ) -> None:
        try:
            gate = AdminGate(cfg.admin_secret)
        except ValueError:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin mode is not configured")
        if not gate.login(x_admin_secret or ""):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Wrong admin secret")

    @app.get("/entries")
    def list_entries(limit: Optional[int] = None, store: LedgerStore = Depends(get_store), cfg: Settings = Depends(get_settings)):
        n = cfg.ledger.history_limit if limit is None else limit
        return {
            "entries": [e.to_record() for e in store.ordered_view(n)],
            "count": len(store),
            "total": store.live_total(),
        }

    @app.post("/entries", status_code=status.HTTP_201_CREATED)
    def add_entry(body: EntryIn, store: LedgerStore = Depends(get_store), cfg: Settings = Depends(get_settings)):
        try:
            value = validate_entry_input(body.value, unit=cfg.ledger.unit)
        except EntryValidationError as e:
            raise HTTPException(status_code=422, detail={"reason": e.reason, "message": str(e)})
        entry = store.insert(value)
        return _entry_out(store, entry)

    @app.delete("/entries/{entry_id}", dependencies=[Depends(require_admin)])
    def delete_entry(entry_id: str, store: LedgerStore = Depends(get_store)):
        removed = store.delete_by_id(entry_id)
        return {"removed": removed, "total": store.live_total(), "flush_warning": store.last_flush_error}

    @app.delete("/entries", dependencies=[Depends(require_admin)])
    def clear_entries(store: LedgerStore = Depends(get_store)):
        store.clear_all()
        return {"cleared": True, "total": store.live_total(), "flush_warning": store.last_flush_error}

    @app.get("/total")
    def total(store: LedgerStore = Depends(get_store), cfg: Settings = Depends(get_settings)):
        return {"total": store.live_total(), "element_count": store.element_count(), "unit": cfg.ledger.unit}

    @app.get("/meadow")
    def meadow(store: LedgerStore = Depends(get_store), cfg: Settings = Depends(get_settings)):
        layout = generate_layout(store.element_count(), cap=cfg.meadow.cap)
        set_meadow_counts(layout.element_count, layout.display_count)
        return layout.to_dict()

    return app


def get_settings_from(app: FastAPI) -> Settings:
    if app.state.settings is None:
        app.state.settings = load_settings()
    return app.state.settings


app = create_app()

"""
==============================================================================
Backup Endpoints
==============================================================================

Export, import, manual save and safety-backup restore.

Endpoints:
---------
- GET  /backup/json            Pretty-printed JSON backup download
- GET  /backup/csv             CSV export, one row per variant
- POST /backup/import          Replace the catalog from an uploaded JSON file
- POST /backup/save            Write the catalog now, bypassing the guard
- POST /backup/restore-safety  Restore from the legacy backup keys

==============================================================================
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response

from app.catalog.transfer import export_backup_json, export_csv, parse_import_document
from app.core import exceptions
from app.core.dependencies import require_loaded_store
from app.services.catalog_store import CatalogStore


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/backup", tags=["Backup"])


def _attachment(filename: str) -> dict:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


class BackupController:
    """Controller for backup and restore operations."""

    def __init__(self, store: CatalogStore):
        self._store = store

    def export_json(self) -> Response:
        filename = f"royal-inventory-backup-{date.today().isoformat()}.json"
        return Response(
            content=export_backup_json(self._store.products),
            media_type="application/json",
            headers=_attachment(filename),
        )

    def export_csv(self) -> Response:
        filename = f"royal-inventory-{date.today().isoformat()}.csv"
        return Response(
            content=export_csv(self._store.products),
            media_type="text/csv",
            headers=_attachment(filename),
        )

    async def import_file(self, raw: bytes) -> dict:
        try:
            products = parse_import_document(raw.decode("utf-8"))
        except UnicodeDecodeError:
            raise exceptions.invalid_import_file("File is not UTF-8 text")
        except ValueError as e:
            raise exceptions.invalid_import_file(str(e))

        saved = await self._store.restore(products)
        return {"success": True, "imported": len(products), "saved": saved}

    async def save(self) -> dict:
        saved_at = await self._store.manual_save()
        return {"success": True, "saved_at": saved_at.isoformat()}

    async def restore_safety(self) -> dict:
        saved = await self._store.restore_from_safety_backup()
        return {"success": True, "restored": len(self._store.products), "saved": saved}


@router.get("/json")
async def download_json(store: CatalogStore = Depends(require_loaded_store)):
    return BackupController(store).export_json()


@router.get("/csv")
async def download_csv(store: CatalogStore = Depends(require_loaded_store)):
    return BackupController(store).export_csv()


@router.post("/import")
async def import_backup(
    file: UploadFile = File(...),
    store: CatalogStore = Depends(require_loaded_store),
):
    """
    Replace the catalog with the products in a JSON backup.

    Accepts a product array or an object with a ``products`` array.
    Missing fields are defaulted; invalid files leave the catalog unchanged.
    """
    raw = await file.read()
    return await BackupController(store).import_file(raw)


@router.post("/save")
async def manual_save(store: CatalogStore = Depends(require_loaded_store)):
    """Save immediately, even when the catalog is empty."""
    return await BackupController(store).save()


@router.post("/restore-safety")
async def restore_safety_backup(store: CatalogStore = Depends(require_loaded_store)):
    return await BackupController(store).restore_safety()

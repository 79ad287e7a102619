import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from app.schemas.models import EntriesResponse, SaveEntriesRequest, UsageRecord
from app.services.entry_store import CorruptStoreError, EntryStore, InvalidEntryError, StorageIOError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/entries", tags=["entries"])

# the offending text is not echoed back: it cannot be encoded as UTF-8
INVALID_TEXT_DETAIL = "date and time must be valid UTF-8 text"

def get_entry_store(request: Request) -> EntryStore:
    return request.app.state.entry_store

def _response(entries, warning=None) -> EntriesResponse:
    return EntriesResponse(entries=entries, count=len(entries), warning=warning)

@router.get("", response_model=EntriesResponse)
async def list_entries(store: EntryStore = Depends(get_entry_store)):
    try:
        entries, warning = await store.load_or_empty()
    except StorageIOError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return _response(entries, warning)

@router.put("", response_model=EntriesResponse)
async def replace_entries(req: SaveEntriesRequest, store: EntryStore = Depends(get_entry_store)):
    try:
        await store.save(req.entries)
    except InvalidEntryError:
        raise HTTPException(status_code=422, detail=INVALID_TEXT_DETAIL)
    except StorageIOError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return _response(req.entries)

@router.post("", response_model=EntriesResponse)
async def add_entry(record: UsageRecord, store: EntryStore = Depends(get_entry_store)):
    try:
        entries = await store.append(record)
    except InvalidEntryError:
        raise HTTPException(status_code=422, detail=INVALID_TEXT_DETAIL)
    except CorruptStoreError as e:
        # refuse to overwrite data we could not read
        raise HTTPException(status_code=409, detail=str(e))
    except StorageIOError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return _response(entries)

from fastapi import APIRouter, Depends

from backend.api.form_routes import get_store
from backend.services.form_store import FormStore

router = APIRouter()

@router.get("/health")
async def health(store: FormStore = Depends(get_store)):
    return {
        "status": "ok" if store.loaded else "loading",
        "forms": len(store.list_all_forms()),
        "instances": store.instance_count,
        "dirty": store.dirty,
        "writing": store.writing,
    }

from fastapi import APIRouter, Depends

from app.interfaces.api.dependencies import RelayContext, get_relay
from app.interfaces.api.schemas import HealthRead

router = APIRouter()


@router.get("/health", response_model=HealthRead)
async def health(relay: RelayContext = Depends(get_relay)) -> HealthRead:
    return HealthRead(connections=len(relay.registry), pending=len(relay.queue))

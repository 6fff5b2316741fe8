"""Share-link routes: encode scenario slots into a token and back."""

from fastapi import APIRouter

from src.api.routes.schedule import to_scenario
from src.api.schemas import ScenarioRequest, SharedScenariosResponse, ShareRequest, ShareResponse
from src.config import settings
from src.sharing.scenario_codec import build_share_url, decode_scenarios, encode_scenarios

router = APIRouter(prefix="/api/v1/share", tags=["sharing"])


@router.post("", response_model=ShareResponse)
async def share(req: ShareRequest):
    """Encode slots into a share token. Same-month repayments are rejected as in /schedule."""
    slots = [None if s is None else to_scenario(s) for s in req.scenarios]
    return ShareResponse(
        token=encode_scenarios(slots),
        url=build_share_url(req.base_url or settings.share_base_url, slots),
    )


@router.get("/{token}", response_model=SharedScenariosResponse)
async def shared_scenarios(token: str):
    """Decode a share token. Unreadable tokens return empty slots, never an error."""
    slots = decode_scenarios(token)
    return SharedScenariosResponse(
        scenarios=[None if s is None else ScenarioRequest.from_model(s) for s in slots],
    )

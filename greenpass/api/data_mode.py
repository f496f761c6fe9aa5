"""Data-mode gate endpoint.

POST /v1/data-mode/enforce - reject TEST_FIXTURE submissions for LIVE tenants

Response bodies are fixed by the client contract, so this router returns
JSONResponse directly instead of raising HTTPException:

    401 {"error": "Unauthorized"}
    403 {"error", "message", "data_mode", "request_id"}
    200 {"success": true, "data_mode", "request_id"}
    500 {"error": <message>, "request_id"}
"""

from uuid import uuid4

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from greenpass.api.dependencies import get_current_user, get_tenant_settings_repo
from greenpass.db.tables import UserRow
from greenpass.governance.data_mode import DataModeGate
from greenpass.repositories.tenants import TenantSettingsRepository

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/v1/data-mode", tags=["data-mode"])

_gate = DataModeGate()


@router.post("/enforce")
async def enforce_data_mode_gate(
    request: Request,
    user: UserRow | None = Depends(get_current_user),
    tenants: TenantSettingsRepository = Depends(get_tenant_settings_repo),
) -> JSONResponse:
    request_id = str(uuid4())
    log = logger.bind(request_id=request_id)

    if user is None:
        return JSONResponse(status_code=401, content={"error": "Unauthorized"})

    try:
        body = await request.json()
        provenance = body.get("provenance") if isinstance(body, dict) else None
        data_mode = await tenants.get_data_mode(user.tenant_id)
        decision = _gate.check(data_mode=data_mode, provenance=provenance)

        if not decision.allowed:
            log.warning(
                "data_mode_violation",
                tenant_id=str(user.tenant_id),
                data_mode=data_mode.value,
                provenance=provenance,
            )
            return JSONResponse(
                status_code=403,
                content={
                    "error": "DATA_MODE_VIOLATION",
                    "message": decision.message,
                    "data_mode": data_mode.value,
                    "request_id": request_id,
                },
            )

        log.info("data_mode_check_passed", data_mode=data_mode.value, provenance=provenance)
        return JSONResponse(
            status_code=200,
            content={
                "success": True,
                "data_mode": data_mode.value,
                "request_id": request_id,
            },
        )
    except Exception as exc:
        log.exception("data_mode_check_failed")
        return JSONResponse(
            status_code=500,
            content={"error": str(exc), "request_id": request_id},
        )

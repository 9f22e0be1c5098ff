from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from reportcards.api.deps import get_rewrite_client
from reportcards.schemas.rewrite import RewriteRequest, RewriteResponse
from reportcards.services.rewrite import RewriteClient, RewriteError

router = APIRouter(tags=["rewrite"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def preflight_response() -> Response:
    """Empty-bodied answer to an OPTIONS request, browser preflight or not."""
    return Response(headers={**CORS_HEADERS, "Access-Control-Allow-Methods": "POST, OPTIONS"})


@router.post("/ai-rewrite", response_model=RewriteResponse)
async def ai_rewrite(request: Request, client: RewriteClient = Depends(get_rewrite_client)):
    try:
        payload = RewriteRequest.model_validate(await request.json())
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Invalid request body"}, headers=CORS_HEADERS)

    try:
        rewritten = await client.rewrite(
            payload.text,
            style_guide=payload.style_guide,
            student_name=payload.student_name,
            provider=payload.provider,
            api_key=payload.custom_api_key,
        )
    except RewriteError as exc:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message}, headers=CORS_HEADERS)

    body = RewriteResponse(rewritten_text=rewritten).model_dump(by_alias=True)
    return JSONResponse(content=body, headers=CORS_HEADERS)

"""Health check routes."""

from fastapi import APIRouter

from core.azure import AzureConfig

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@router.get("/health/provider")
async def provider_status():
    """Check model provider configuration without calling it."""
    config = AzureConfig.from_env()
    configured = config.is_openai_configured()

    return {
        "provider_configured": configured,
        "provider_info": {
            "chat_deployment": config.chat_deployment,
            "vision_deployment": config.vision_deployment,
            "api_version": config.openai_api_version,
        } if configured else None,
    }

from fastapi import HTTPException, status


def raise_service_error(message: str):
    """Convierte un resultado fallido (success, message, data) de un servicio en un error HTTP"""
    lowered = message.lower()
    if lowered.startswith("database error"):
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    elif "not found" in lowered:
        code = status.HTTP_404_NOT_FOUND
    else:
        code = status.HTTP_409_CONFLICT
    raise HTTPException(status_code=code, detail=message)

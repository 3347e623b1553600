# app/common/response.py

from fastapi import status
from fastapi.responses import JSONResponse

class ErrorResponse:
    @staticmethod
    def send(error="An error occurred", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, headers=None):
        response = {
            "success": False,
            "error": error
        }
        return JSONResponse(content=response, status_code=status_code, headers=headers)

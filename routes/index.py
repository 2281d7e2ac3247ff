from fastapi import APIRouter, Request

router = APIRouter()

@router.get("/")
def root(request: Request):
    return {"message": "OK", "sessions": len(request.app.state.sessions)}

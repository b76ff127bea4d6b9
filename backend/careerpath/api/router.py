from fastapi import APIRouter

from careerpath.api.routes import auth
from careerpath.api.routes import candidates
from careerpath.api.routes import offers
from careerpath.api.routes import processes
from careerpath.api.routes import users

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(processes.router)
api_router.include_router(candidates.router)
api_router.include_router(offers.router)
api_router.include_router(users.router)

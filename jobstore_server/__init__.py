"""
Job Store Server module.

HTTP API over the job repository, built on FastAPI and served by uvicorn.
"""

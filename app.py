# =======================================================================================
# app.py - ASGI entrypoint (uvicorn app:app)
# =======================================================================================
from doorcheck.config import Config
from doorcheck.main import create_app

config = Config.from_env()
app = create_app(config)

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT)

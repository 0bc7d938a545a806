import uvicorn

from src.cms.core.config import config

if __name__ == "__main__":
    uvicorn.run(
        "src.cms.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=config.server_reload,
        log_level=config.server_log_level,
    )

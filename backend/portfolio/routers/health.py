from fastapi import APIRouter, Depends
from portfolio.core.mailer import SmtpMailer, get_mailer

router = APIRouter(prefix="/health", tags=["health"])

@router.get("")
async def health_root():
    return {"status": "ok"}

@router.get("/mail")
async def health_mail(mailer: SmtpMailer = Depends(get_mailer)):
    # no network round-trip and no credentials here, only what is configured
    cfg = mailer.cfg
    return {
        "configured": mailer.configured,
        "host": cfg.smtp_host,
        "port": cfg.smtp_port,
        "security": cfg.smtp_security,
        "auth": bool(cfg.smtp_username),
    }

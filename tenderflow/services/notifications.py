import aiohttp
from tenderflow.core.logging_config import logger
from tenderflow.models.documents import TenderDocument
from tenderflow.core.config import settings


async def send_telegram_alert(document: TenderDocument, message: str) -> None:
    if not settings.TELEGRAM_BOT_TOKEN or not settings.TELEGRAM_CHAT_ID:
        logger.debug("Telegram credentials not configured, skipping alert")
        return

    full_message = (
        f"Tender document: {document.id}\n"
        f"Title: {document.title}\n"
        f"Vendor: {document.vendor_name or '-'}\n"
        f"Stage: {document.workflow_stage}\n"
        f"Message: {message}"
    )

    url = f"https://api.telegram.org/bot{settings.TELEGRAM_BOT_TOKEN}/sendMessage"
    payload = {
        "chat_id": settings.TELEGRAM_CHAT_ID,
        "text": full_message,
    }

    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(url, json=payload, timeout=aiohttp.ClientTimeout(total=10)) as response:
                if response.status != 200:
                    logger.error(f"Failed to send Telegram alert: HTTP {response.status}, {await response.text()}")
                else:
                    logger.info(f"Telegram alert sent for document {document.id}: {message}")
    except aiohttp.ClientError as e:
        logger.error(f"Error sending Telegram alert for document {document.id}: {str(e)}")

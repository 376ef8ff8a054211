import asyncio
from pathlib import Path
from typing import Any

import aiohttp
from tenderflow.core.config import settings
from tenderflow.core.errors import DependencyFailure
from tenderflow.core.logging_config import logger
from tenderflow.models.documents import TenderDocument
from tenderflow.schemas.analysis import AnalysisResult

FINAL_STATUSES = {"SUCCESS", "REJECTED", "ERROR"}


def _first(result: dict, *keys: str) -> Any:
    for key in keys:
        if result.get(key) not in (None, ""):
            return result[key]
    return None


def _number(value: Any) -> float | None:
    if value in (None, ""):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric value in AI result: {value!r}")
        return None


def parse_analysis(result: dict) -> AnalysisResult:
    """Maps the provider's result onto the fields the workflow cares about."""
    suggestions = result.get("biddingSuggestions") or result.get("bidding_suggestions")
    if not isinstance(suggestions, dict):
        suggestions = {}
    return AnalysisResult(
        document_type=_first(result, "document_type", "documentType", "classification"),
        vendor_name=_first(result, "vendor_name", "vendorName", "vendor"),
        estimated_budget=_number(_first(result, "estimated_budget", "estimatedBudget", "budget")),
        risk_level=_first(result, "risk_level", "riskLevel"),
        recommended_total=_number(_first(suggestions, "recommendedTotal", "recommended_total")),
        line_items=result.get("line_items") or result.get("lineItems") or [],
        compliance=result.get("compliance") or [],
        raw=result,
    )


def parse_line_items(items: list) -> list[dict]:
    """Line items as ``TenderLineItem`` fields, in extraction order."""
    parsed = []
    for position, item in enumerate(items):
        if not isinstance(item, dict):
            continue
        quantity = _number(item.get("quantity"))
        price = _number(_first(item, "estimatedUnitPrice", "estimatedPrice", "estimated_price", "unitPrice"))
        parsed.append({
            "position": position,
            "name": str(item.get("name") or f"Item {position + 1}"),
            "unit": item.get("unit"),
            "quantity": quantity,
            "estimated_price": price,
            "total_price": quantity * price if quantity is not None and price is not None else None,
            "notes": item.get("notes"),
        })
    return parsed


class AIAnalysisClient:
    """Task-style AI provider: upload to ``/parse``, then poll ``/task_status/{id}``."""

    def __init__(self, base_url: str, token: str | None = None, timeout: int = 600, interval: int = 10):
        self.base_url = base_url.rstrip("/")
        self.headers = {"Authorization": f"Bearer {token}"} if token else {}
        self.timeout = timeout
        self.interval = interval

    async def analyze(self, document: TenderDocument, file_path: Path) -> AnalysisResult:
        logger.info(f"Starting AI analysis for document {document.id}")
        content = await asyncio.to_thread(file_path.read_bytes)
        task_id = await self.send_to_parse(content, document.original_file_name or file_path.name)
        if not task_id:
            raise DependencyFailure(f"AI provider did not accept document {document.id}")

        task_result = await self.poll_task(task_id)
        if not task_result:
            raise DependencyFailure(f"Polling AI task {task_id} failed for document {document.id}")

        status = task_result.get("status")
        logger.info(f"AI result for document {document.id}: status={status}")
        if status != "SUCCESS":
            raise DependencyFailure(f"AI task {task_id} finished with status {status}")

        result = task_result.get("result")
        if not isinstance(result, dict):
            raise DependencyFailure(f"AI task {task_id} returned no structured result")
        return parse_analysis(result)

    async def send_to_parse(self, content: bytes, filename: str) -> str | None:
        async with aiohttp.ClientSession() as session:
            try:
                form_data = aiohttp.FormData()
                form_data.add_field("files", content, filename=filename)
                form_data.add_field("details", "")

                async with session.post(f"{self.base_url}/parse", headers=self.headers, data=form_data) as resp:
                    if resp.status in (200, 202):
                        data = await resp.json()
                        task_id = data.get("task_id")
                        if task_id:
                            logger.info(f"File sent to AI, task_id: {task_id}, status: {resp.status}")
                            return task_id
                        logger.error(f"AI response missing task_id: {await resp.text()}")
                        return None
                    logger.error(f"Failed to send to AI: {resp.status}, response: {await resp.text()}")
                    return None
            except aiohttp.ClientError as e:
                logger.error(f"Error sending file to AI: {e}")
                return None

    async def poll_task(self, task_id: str) -> dict | None:
        loop = asyncio.get_running_loop()
        start_time = loop.time()
        async with aiohttp.ClientSession() as session:
            while True:
                try:
                    url = f"{self.base_url}/task_status/{task_id}"
                    async with session.get(url, headers=self.headers) as resp:
                        if resp.status != 200:
                            logger.error(f"Polling: unexpected status code {resp.status}")
                            return None
                        task_data = await resp.json()
                        if task_data.get("status") in FINAL_STATUSES:
                            return task_data
                        logger.info(f"Task {task_id} still in progress")
                except aiohttp.ClientError as e:
                    logger.error(f"Error polling task {task_id}: {e}")
                    return None

                await asyncio.sleep(self.interval)
                if loop.time() - start_time > self.timeout:
                    logger.error(f"Task {task_id} polling timed out")
                    return {"status": "TIMEOUT", "result": "Task polling timed out"}


def get_analyzer() -> AIAnalysisClient | None:
    if not settings.AI_API_BASE_URL:
        return None
    return AIAnalysisClient(
        settings.AI_API_BASE_URL,
        settings.AI_API_TOKEN,
        timeout=settings.AI_POLL_TIMEOUT,
        interval=settings.AI_POLL_INTERVAL,
    )

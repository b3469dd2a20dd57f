"""Fetch a job posting from a URL through the model's web search tool.

The page is read by Anthropic's server-side search tool. The local URL check
only rejects internal or unresolvable hosts before a paid call is made; it
resolves DNS, so it runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging

from jasaoseo.clients.llm_client import DEFAULT_MODEL, LLMClient, LLMResponse
from jasaoseo.utils.url_validator import validate_url

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an intelligent web scraper. Your task is to access the provided URL, "
    "extract the main content of the job posting, and return it as clean, formatted text. "
    "Focus on job title, company, responsibilities, qualifications, and preferred skills. "
    "Exclude irrelevant content like headers, footers, navigation bars, and advertisements."
)


async def fetch_job_posting(llm: LLMClient, url: str, model: str = DEFAULT_MODEL) -> LLMResponse:
    """Return the posting found at ``url``; ``text`` holds the stripped posting.

    Raises ValueError for invalid or internal URLs and when nothing could be
    extracted.
    """
    if not url or not url.startswith("http"):
        raise ValueError("유효한 URL을 입력해주세요.")
    await asyncio.to_thread(validate_url, url)

    logger.info("Fetching job posting: %s", url)
    response = await llm.generate(
        prompt=f"Please scrape the job posting from this URL: {url}",
        system=SYSTEM_PROMPT,
        model=model,
        use_search=True,
    )
    response.text = response.text.strip()
    if not response.text:
        raise ValueError(
            "URL에서 채용 공고 내용을 추출하지 못했습니다. "
            "URL을 확인하거나 내용을 직접 복사하여 붙여넣어 주세요."
        )
    return response

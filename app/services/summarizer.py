"""Project summarization service using LLM APIs"""

from typing import Optional
import logging

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from app.config.settings import settings

logger = logging.getLogger(__name__)

ELI5_SYSTEM_MESSAGE = (
    "You explain software projects to people without a technical background. "
    "Answer in plain English, in at most three sentences."
)
SENTIMENT_SYSTEM_MESSAGE = (
    "You summarize how the Hacker News community feels about a software project. "
    "Be neutral and concise."
)


class SummarizerService:
    """Service to generate ELI5 descriptions and Hacker News sentiment summaries"""

    def __init__(self, provider: Optional[str] = None):
        self.provider = provider or settings.LLM_PROVIDER

        if self.provider == "openai":
            if not settings.OPENAI_API_KEY:
                raise ValueError("OPENAI_API_KEY is required when LLM_PROVIDER is 'openai'")
            self.openai_client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)
        elif self.provider == "anthropic":
            if not settings.ANTHROPIC_API_KEY:
                raise ValueError("ANTHROPIC_API_KEY is required when LLM_PROVIDER is 'anthropic'")
            self.anthropic_client = AsyncAnthropic(api_key=settings.ANTHROPIC_API_KEY)
        else:
            raise ValueError(f"Unsupported LLM provider: {self.provider}")

    async def eli5_from_readme(self, readme: str) -> str:
        """
        Explain a project like the reader is five, based on its README

        Args:
            readme: README plain text (truncated to README_MAX_CHARS)

        Returns:
            The ELI5 description
        """
        prompt = self._build_eli5_prompt(readme[: settings.README_MAX_CHARS])
        return await self._complete(ELI5_SYSTEM_MESSAGE, prompt)

    async def hackernews_sentiment(self, comments: str) -> str:
        """
        Summarize the sentiment of Hacker News comments about a project

        Args:
            comments: Comment groups joined by newlines

        Returns:
            A short sentiment summary
        """
        prompt = self._build_sentiment_prompt(comments)
        return await self._complete(SENTIMENT_SYSTEM_MESSAGE, prompt)

    @staticmethod
    def _build_eli5_prompt(readme: str) -> str:
        return f"""Here is the README of a GitHub project:

{readme}

Explain what this project does like I'm five years old. Do not use markdown."""

    @staticmethod
    def _build_sentiment_prompt(comments: str) -> str:
        # Keep the prompt bounded; comment threads can be very long
        return f"""Here are Hacker News comments about a GitHub project, grouped by story:

{comments[:8000]}

Summarize the overall sentiment (positive, negative or mixed) and the main points
people raise, in at most four sentences. Do not use markdown."""

    async def _complete(self, system_message: str, prompt: str) -> str:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(settings.LLM_MAX_ATTEMPTS),
            wait=wait_exponential(multiplier=settings.LLM_BACKOFF_BASE_SECONDS, max=settings.LLM_BACKOFF_MAX_SECONDS),
            reraise=True,
        ):
            with attempt:
                if self.provider == "openai":
                    content = await self._complete_openai(system_message, prompt)
                else:
                    content = await self._complete_anthropic(system_message, prompt)

        content = (content or "").strip()
        if not content:
            raise ValueError("LLM returned an empty completion")
        return content

    async def _complete_openai(self, system_message: str, prompt: str) -> str:
        """Generate a completion using OpenAI GPT"""
        response = await self.openai_client.chat.completions.create(
            model=settings.OPENAI_MODEL,
            messages=[
                {"role": "system", "content": system_message},
                {"role": "user", "content": prompt},
            ],
            temperature=0.3,
            max_tokens=settings.LLM_MAX_TOKENS,
        )
        return response.choices[0].message.content

    async def _complete_anthropic(self, system_message: str, prompt: str) -> str:
        """Generate a completion using Anthropic Claude"""
        response = await self.anthropic_client.messages.create(
            model=settings.ANTHROPIC_MODEL,
            max_tokens=settings.LLM_MAX_TOKENS,
            temperature=0.3,
            system=system_message,
            messages=[{"role": "user", "content": prompt}],
        )
        return response.content[0].text

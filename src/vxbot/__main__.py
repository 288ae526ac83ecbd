import asyncio
import json
import signal
import sys
import threading

import structlog

from vxbot.bot import Bot
from vxbot.config import AppConfig, LoggingConfig, load_app_config
from vxbot.embedding import EmbeddingManager
from vxbot.knowledge import JsonDocumentSource
from vxbot.llm.provider import ProviderFactory
from vxbot.messaging.platform.adapter import SlackPlatform
from vxbot.rag.answerer import GroundedAnswerer
from vxbot.rag.search import HybridSearchEngine
from vxbot.rag.service import QueryService
from vxbot.util.logging import configure_logging
from vxbot.util.loop import BackgroundLoop

_logger = structlog.get_logger()

_USAGE = """Usage: python -m vxbot <command>

Commands:
  serve              Run the Slack bot (socket mode)
  ask "<question>"   Answer one question and print the result
  status             Initialize the pipeline and print a summary"""


def build_query_service(config: AppConfig) -> QueryService:
    embeddings = EmbeddingManager(config.embedding)
    return QueryService(
        source=JsonDocumentSource(config.data.directory, config.data.resources),
        embeddings=embeddings,
        search=HybridSearchEngine(embeddings, config.search),
        answerer=GroundedAnswerer(ProviderFactory().from_config(config.llm), config.grounding),
    )


def _init_logging(logging_config: LoggingConfig) -> None:
    configure_logging(
        json_output=logging_config.json_output,
        log_level=logging_config.log_level,
    )


def serve(config: AppConfig) -> None:
    service = build_query_service(config)
    loop = BackgroundLoop()
    loop.start()

    # Warm up before accepting events; a failure here is retried on the first query
    try:
        loop.run(service.initialize())
    except Exception:
        _logger.exception("warmup_failed")

    platform = SlackPlatform(config.slack)
    bot = Bot(platform=platform, platform_config=config.slack, service=service, loop=loop)
    platform.on_message(bot.handle)

    t = threading.Thread(target=platform.start, name="platform-slack", daemon=True)
    t.start()
    _logger.info("bot_started", chunks=service.chunk_count)

    shutdown = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: shutdown.set())
    signal.signal(signal.SIGTERM, lambda *_: shutdown.set())
    shutdown.wait()

    _logger.info("bot_stopping")
    platform.stop()
    loop.stop()


def ask(config: AppConfig, question: str) -> int:
    service = build_query_service(config)
    response = asyncio.run(service.query(question))
    print(response.answer)
    _logger.info("answer_printed", **{k: v for k, v in response.to_dict().items() if k != "answer"})
    return 0 if response.success else 1


def status(config: AppConfig) -> int:
    service = build_query_service(config)
    try:
        asyncio.run(service.initialize())
    except Exception:
        _logger.exception("status_initialization_failed")
        return 1

    summary = {
        "ready": service.is_ready(),
        "documents": service.documents,
        "chunks": service.chunk_count,
        "embedding_mode": "keyword_hash" if service.embedding_fallback_mode else "model",
        "llm_provider": config.llm.provider.value,
    }
    print(json.dumps(summary, ensure_ascii=False, indent=2))
    return 0


def main() -> None:
    args = sys.argv[1:]
    if not args or args[0] not in ("serve", "ask", "status"):
        print(_USAGE)
        sys.exit(1)

    config = load_app_config()
    _init_logging(config.logging)

    match args[0]:
        case "serve":
            serve(config)
        case "ask":
            question = " ".join(args[1:]).strip()
            if not question:
                print('ask requires a question, e.g. python -m vxbot ask "A7S3 몇 대 있어요?"')
                sys.exit(1)
            sys.exit(ask(config, question))
        case "status":
            sys.exit(status(config))


if __name__ == "__main__":
    main()

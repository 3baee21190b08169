import logging
import time

import httpx

from telegram import LinkPreviewOptions, Update
from telegram.error import Conflict
from telegram.ext import (
    filters,
    Application,
    ApplicationBuilder,
    ContextTypes,
    MessageHandler,
)

from bumpp.commands import CommandExecutor
from bumpp.dispatcher import TICK_INTERVAL, Dispatcher
from bumpp.models import Reply
from bumpp.parser import parse
from bumpp.repository import Repository

# ----------------------------------------------------------------
#  @logging
# ----------------------------------------------------------------

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)

# httpx logs every polling request at INFO
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

# ----------------------------------------------------------------
#  @utils
# ----------------------------------------------------------------


def get_executor(context: ContextTypes.DEFAULT_TYPE) -> CommandExecutor:
    return context.bot_data["executor"]


def is_stale(update: Update, context: ContextTypes.DEFAULT_TYPE) -> bool:
    started_at = context.bot_data.get("started_at", 0)
    return update.message.date.timestamp() < started_at


async def send_reply(update: Update, reply: Reply) -> None:
    if reply.rich:
        await update.message.reply_text(
            reply.text,
            parse_mode="HTML",
            link_preview_options=LinkPreviewOptions(is_disabled=True),
        )
        return

    await update.message.reply_text(reply.text)


# ----------------------------------------------------------------
#  @handlers
# ----------------------------------------------------------------


async def text_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    if not update.message or not update.message.text:
        return

    if is_stale(update, context):
        logger.info("[%s] Ignoring message sent before startup", update.effective_chat.id)
        return

    executor = get_executor(context)
    command = parse(update.message.text, executor.bot_username)

    if command is None:
        return

    chat_id = update.effective_chat.id
    logger.info("[%s] Received %s command", chat_id, command.kind.value)

    reply = executor.execute(command, chat_id)

    if reply is not None:
        await send_reply(update, reply)


async def new_members_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    members = update.message.new_chat_members or []

    if not any(member.id == context.bot.id for member in members):
        return

    logger.info("[%s] Added to chat", update.effective_chat.id)

    await send_reply(update, get_executor(context).info())


async def dispatch_job(context: ContextTypes.DEFAULT_TYPE):
    dispatcher: Dispatcher = context.bot_data["dispatcher"]
    await dispatcher.tick()


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE):
    # Conflicts occur during redeploys
    if isinstance(context.error, Conflict):
        return

    if isinstance(context.error, httpx.ReadError):
        return

    logger.error("An error occurred: ", exc_info=context.error)

    developer_chat_id = context.bot_data.get("developer_chat_id")

    if developer_chat_id:
        await context.bot.send_message(
            developer_chat_id, f"[LOG] An error occurred: {context.error}"
        )


# ----------------------------------------------------------------
#  @runner
# ----------------------------------------------------------------


def build_application(
    token: str,
    repository: Repository,
    bot_username: str,
    developer_chat_id: int | None = None,
) -> Application:
    app = ApplicationBuilder().token(token).build()

    # Rehydrate before the first tick can run
    repository.load()

    async def send_bump(chat_id: int, text: str):
        await app.bot.send_message(chat_id, text)

    app.bot_data["executor"] = CommandExecutor(repository, bot_username)
    app.bot_data["dispatcher"] = Dispatcher(repository, send_bump)
    app.bot_data["developer_chat_id"] = developer_chat_id
    app.bot_data["started_at"] = time.time()

    app.job_queue.run_repeating(dispatch_job, interval=TICK_INTERVAL, first=TICK_INTERVAL)

    app.add_error_handler(error_handler)

    app.add_handler(
        MessageHandler(filters.StatusUpdate.NEW_CHAT_MEMBERS, new_members_handler)
    )
    app.add_handler(MessageHandler(filters.TEXT & (~filters.COMMAND), text_handler))

    return app


def run_polling(
    token: str,
    repository: Repository,
    bot_username: str,
    developer_chat_id: int | None = None,
) -> None:
    app = build_application(token, repository, bot_username, developer_chat_id)

    # Commands sent while the bot was down are dropped
    app.run_polling(drop_pending_updates=True)

"""Telegram bot that turns voice notes into stored financial records."""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Any

from telegram import Update
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from .config import get_settings
from .container import Container, build_container
from .domain.dtos import FinancialSummary, TranscriptionRequest
from .domain.entities import AudioFile, User, utcnow
from .domain.errors import ConfigurationError
from .logging_setup import configure_logging
from .migrations import init_db
from .use_cases.process_audio import ProcessedAudio

logger = logging.getLogger(__name__)

CONTAINER_KEY = "container"

TYPE_INDICATORS = {"income": "📈", "expense": "📉", "transfer": "🔄"}

WELCOME_MESSAGE = (
    "👋 Olá! Eu sou seu assistente financeiro por voz.\n\n"
    "Envie uma mensagem de voz ou um arquivo de áudio contando seus gastos, "
    "receitas, contas ou metas e eu registro tudo para você.\n\n"
    "Exemplo: \"Gastei 50 reais no almoço e recebi 2000 de salário\".\n\n"
    "Use /help para ver os comandos."
)

HELP_MESSAGE = (
    "📌 Como usar:\n"
    "• Grave uma mensagem de voz descrevendo transações, contas ou metas\n"
    "• Ou envie um arquivo de áudio (mp3, ogg, wav, m4a...)\n"
    "• /summary mostra o resumo dos últimos 30 dias\n"
    "• /help mostra esta ajuda"
)

SEND_AUDIO_MESSAGE = "🎤 Envie uma mensagem de voz ou um arquivo de áudio descrevendo suas finanças."
PROCESSING_MESSAGE = "🎧 Processando seu áudio... Aguarde um momento."
FAILURE_MESSAGE = "❌ Não consegui processar seu áudio. Tente novamente em instantes."
SUMMARY_FAILURE_MESSAGE = "❌ Não consegui gerar o resumo agora. Tente novamente em instantes."


def format_money(value: Decimal | float) -> str:
    formatted = f"{Decimal(str(value)):,.2f}"
    return "R$ " + formatted.replace(",", "_").replace(".", ",").replace("_", ".")


def format_processed_result(processed: ProcessedAudio) -> str:
    extracted = processed.extracted
    lines = ["🎙️ Transcrição:", f"\"{processed.transcription.text}\""]

    if extracted.is_empty():
        lines += ["", "ℹ️ Não identifiquei informações financeiras nesta mensagem."]
        return "\n".join(lines)

    if extracted.transactions:
        lines += ["", "💰 Transações:"]
        for tx in extracted.transactions:
            indicator = TYPE_INDICATORS.get(tx.type, "•")
            lines.append(f"{indicator} {format_money(tx.amount)} - {tx.description} ({tx.category})")

    if extracted.accounts:
        lines += ["", "🏦 Contas:"]
        for account in extracted.accounts:
            line = f"• {account.name} ({account.type})"
            if account.bank:
                line += f" - {account.bank}"
            if account.balance is not None:
                line += f": {format_money(account.balance)}"
            lines.append(line)

    if extracted.goals:
        lines += ["", "🎯 Metas:"]
        for goal in extracted.goals:
            lines.append(
                f"• {goal.title}: {format_money(goal.current_amount)} de "
                f"{format_money(goal.target_amount)} ({goal.progress_percentage():.0f}%)"
            )

    if extracted.notes:
        lines += ["", "📝 Observações:"]
        lines += [f"• {note}" for note in extracted.notes]

    lines += ["", f"Confiança: {extracted.confidence * 100:.0f}%"]

    saved = processed.saved
    if not (saved.transaction_ids or saved.account_ids or saved.goal_ids):
        lines.append("⚠️ Nada foi salvo. Tente gravar o áudio novamente com mais detalhes.")
    return "\n".join(lines)


def format_summary(summary: FinancialSummary) -> str:
    lines = [
        f"📊 Resumo de {summary.start_date:%d/%m/%Y} a {summary.end_date:%d/%m/%Y}",
        "",
        f"📈 Receitas: {format_money(summary.total_income)}",
        f"📉 Despesas: {format_money(summary.total_expenses)}",
        f"💵 Saldo: {format_money(summary.net_balance)}",
        f"🧾 Transações: {summary.transaction_count}",
        "",
        f"🏦 Contas ativas: {summary.account_count} ({format_money(summary.total_balance)})",
        f"🎯 Metas ativas: {summary.active_goal_count} de {summary.goal_count}"
        f" ({summary.average_goal_completion:.0f}% concluído em média)",
    ]
    if summary.category_summary:
        lines += ["", "Despesas por categoria:"]
        lines += [
            f"• {category}: {format_money(total)}"
            for category, total in summary.category_summary.items()
        ]
    return "\n".join(lines)


def _container(context: ContextTypes.DEFAULT_TYPE) -> Container:
    return context.application.bot_data[CONTAINER_KEY]


def sender_from(telegram_user: Any) -> User:
    return User(
        id=telegram_user.id,
        username=getattr(telegram_user, "username", None),
        first_name=getattr(telegram_user, "first_name", None),
        last_name=getattr(telegram_user, "last_name", None),
    )


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(WELCOME_MESSAGE)


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(HELP_MESSAGE)


async def summary_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user_id = update.effective_user.id
    try:
        summary = await asyncio.to_thread(_container(context).financial_summary.execute, user_id)
    except Exception:
        logger.exception("Error building summary for user %s", user_id)
        await update.message.reply_text(SUMMARY_FAILURE_MESSAGE)
        return
    await update.message.reply_text(format_summary(summary))


async def _process_audio(update: Update, context: ContextTypes.DEFAULT_TYPE, media: Any) -> None:
    user_id = update.effective_user.id
    status_msg = await update.message.reply_text(PROCESSING_MESSAGE)

    try:
        sender = sender_from(update.effective_user)
        logger.info("Audio message from %s (%s)", sender.display_name, sender.id)
        container = _container(context)
        mime_type = media.mime_type or "audio/ogg"
        container.transcribe_audio.check(mime_type, media.file_size)

        telegram_file = await context.bot.get_file(media.file_id)
        file_size = media.file_size or telegram_file.file_size or None
        if file_size is None:
            logger.info("Telegram reported no size for file %s", media.file_id)
        audio_file = AudioFile(
            file_id=media.file_id,
            file_path=telegram_file.file_path,
            mime_type=mime_type,
            file_size=file_size,
        )
        request = TranscriptionRequest(
            audio_file=audio_file,
            user_id=sender.id,
            username=sender.username,
            audio_duration=float(media.duration) if media.duration else None,
            timestamp=utcnow(),
        )
        processed = await asyncio.to_thread(container.process_audio.execute, request)
    except Exception:
        logger.exception("Error processing audio from user %s", user_id)
        await status_msg.edit_text(FAILURE_MESSAGE)
        return

    await status_msg.edit_text(format_processed_result(processed))


async def handle_voice(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _process_audio(update, context, update.message.voice)


async def handle_audio(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _process_audio(update, context, update.message.audio)


async def handle_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(SEND_AUDIO_MESSAGE)


def build_application(container: Container) -> Application:
    token = container.settings.telegram_bot_token
    if not token:
        raise ConfigurationError("Missing required configuration: TELEGRAM_BOT_TOKEN")

    application = ApplicationBuilder().token(token).build()
    application.bot_data[CONTAINER_KEY] = container

    application.add_handler(CommandHandler("start", start_command))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("summary", summary_command))
    application.add_handler(MessageHandler(filters.VOICE, handle_voice))
    application.add_handler(MessageHandler(filters.AUDIO, handle_audio))
    application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_text))
    return application


def main() -> None:
    settings = get_settings()
    configure_logging(settings)
    try:
        settings.validate_required()
    except ConfigurationError as exc:
        raise SystemExit(str(exc)) from exc

    container = build_container(settings)
    init_db(container.engine)
    application = build_application(container)
    logger.info("Starting Telegram bot...")
    try:
        application.run_polling(drop_pending_updates=True)
    finally:
        container.dispose()


if __name__ == "__main__":
    main()

"""
Tests for the chat command cogs.

Commands are invoked through their callbacks with a mocked context, so no
Discord connection is involved.
"""
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from rich.console import Console

from conftest import FixedRates
from falbot.billing.store import JsonBalanceStore
from falbot.billing.units import dcr_to_atoms
from falbot.commands import COMMAND_MODULES, setup_commands
from falbot.commands.balance_commands import BalanceCommands
from falbot.commands.generation_commands import GenerationCommands
from falbot.commands.model_commands import GENERAL_HELP, ModelCommands
from falbot.core.bot import log_services_setup
from falbot.fal.options import FastSDXLOptions, TopazUpscaleOptions
from falbot.fal.registry import build_registry
from falbot.fal.requests import AudioRequest, ImageRequest, VideoRequest
from falbot.fal.types import Capability


@pytest.fixture
def mock_bot(tmp_path):
    bot = MagicMock()
    bot.registry = build_registry()
    bot.orchestrator = MagicMock()
    bot.orchestrator.run = AsyncMock(return_value=object())
    bot.rates = FixedRates()
    bot.store = JsonBalanceStore(tmp_path / "balances.json", tmp_path / "ledger.jsonl", bot.rates)
    return bot


@pytest.fixture
def mock_ctx():
    ctx = MagicMock()
    ctx.author.id = 42
    ctx.guild = None
    ctx.reply = AsyncMock()
    ctx.message.attachments = []
    ctx.command.name = "test"
    return ctx


def _replies(ctx):
    return [c.args[0] for c in ctx.reply.call_args_list]


def _submitted(bot):
    args, kwargs = bot.orchestrator.run.call_args
    return args[0], kwargs.get("prompt")


@pytest.mark.asyncio
async def test_text2image_submits_typed_request(mock_bot, mock_ctx):
    cog = GenerationCommands(mock_bot)
    await cog.text2image.callback(cog, mock_ctx, args="a red fox --num_images 2 --style wild")

    request, prompt = _submitted(mock_bot)
    assert isinstance(request, ImageRequest)
    assert request.model == "fast-sdxl"
    assert request.capability == Capability.TEXT2IMAGE
    assert request.user_id == "42"
    assert request.prompt == "a red fox"
    assert request.options == FastSDXLOptions(num_images=2)
    assert request.extra_options == {"style": "wild"}
    assert prompt == "a red fox"
    # DMs get no acknowledgement
    mock_ctx.reply.assert_not_called()


@pytest.mark.asyncio
async def test_guild_invocation_is_acknowledged(mock_bot, mock_ctx):
    mock_ctx.guild = MagicMock()
    cog = GenerationCommands(mock_bot)
    await cog.text2image.callback(cog, mock_ctx, args="a fox")
    assert "DMs" in _replies(mock_ctx)[0]


@pytest.mark.asyncio
async def test_missing_prompt_shows_model_usage(mock_bot, mock_ctx):
    cog = GenerationCommands(mock_bot)
    await cog.text2image.callback(cog, mock_ctx, args="")

    mock_bot.orchestrator.run.assert_not_called()
    assert _replies(mock_ctx)[0].startswith("**fast-sdxl**\nUsage: !text2image")


@pytest.mark.asyncio
async def test_per_job_model_flag(mock_bot, mock_ctx):
    cog = GenerationCommands(mock_bot)
    await cog.text2image.callback(cog, mock_ctx, args="a fox --model flux/dev")

    request, _ = _submitted(mock_bot)
    assert request.model == "flux/dev"
    assert "model" not in request.extra_options
    # The user's default is untouched
    assert mock_bot.registry.get_current_model(Capability.TEXT2IMAGE, "42").name == "fast-sdxl"


@pytest.mark.asyncio
async def test_model_flag_of_wrong_capability_is_rejected(mock_bot, mock_ctx):
    cog = GenerationCommands(mock_bot)
    await cog.text2image.callback(cog, mock_ctx, args="a fox --model veo3")

    mock_bot.orchestrator.run.assert_not_called()
    assert _replies(mock_ctx)[0].startswith("Error:")


@pytest.mark.asyncio
async def test_model_option_is_not_a_model_switch(mock_bot, mock_ctx):
    cog = GenerationCommands(mock_bot)
    await cog.video2video.callback(cog, mock_ctx, args="https://cdn/clip.mp4 --model proteus")

    request, _ = _submitted(mock_bot)
    assert request.model == "topaz-upscale-video"
    assert request.options == TopazUpscaleOptions(model="proteus")


@pytest.mark.asyncio
async def test_bad_flag_value_is_reported(mock_bot, mock_ctx):
    cog = GenerationCommands(mock_bot)
    await cog.text2image.callback(cog, mock_ctx, args="a fox --num_images lots")

    mock_bot.orchestrator.run.assert_not_called()
    assert "num_images" in _replies(mock_ctx)[0]


@pytest.mark.asyncio
async def test_attachment_counts_as_url(mock_bot, mock_ctx):
    mock_ctx.message.attachments = [MagicMock(url="https://cdn/att.png")]
    cog = GenerationCommands(mock_bot)
    await cog.image2video.callback(cog, mock_ctx, args="the cat yawns")

    request, prompt = _submitted(mock_bot)
    assert isinstance(request, VideoRequest)
    assert request.image_url == "https://cdn/att.png"
    assert request.prompt == "the cat yawns"
    assert prompt == "the cat yawns"


@pytest.mark.asyncio
async def test_lipsync_takes_second_url_as_audio(mock_bot, mock_ctx):
    cog = GenerationCommands(mock_bot)
    await cog.video2video.callback(
        cog, mock_ctx, args="https://cdn/talk.mp4 https://cdn/voice.mp3 --model sync-lipsync-v2"
    )

    request, _ = _submitted(mock_bot)
    assert request.model == "sync-lipsync-v2"
    assert request.video_url == "https://cdn/talk.mp4"
    assert request.audio_url == "https://cdn/voice.mp3"


@pytest.mark.asyncio
async def test_text2music(mock_bot, mock_ctx):
    cog = GenerationCommands(mock_bot)
    await cog.text2music.callback(cog, mock_ctx, args="lofi beats --duration 30")

    request, _ = _submitted(mock_bot)
    assert isinstance(request, AudioRequest)
    assert request.prompt == "lofi beats"
    assert request.capability == Capability.TEXT2MUSIC


@pytest.mark.asyncio
async def test_setmodel_and_reset(mock_bot, mock_ctx):
    cog = ModelCommands(mock_bot)
    await cog.setmodel.callback(cog, mock_ctx, "text2image", "flux/schnell")
    assert mock_bot.registry.get_current_model(Capability.TEXT2IMAGE, "42").name == "flux/schnell"
    assert mock_bot.registry.get_current_model(Capability.TEXT2IMAGE).name == "fast-sdxl"
    assert _replies(mock_ctx)[-1].startswith("Your text2image model is now flux/schnell")

    await cog.setmodel.callback(cog, mock_ctx, "text2image", "default")
    assert mock_bot.registry.get_current_model(Capability.TEXT2IMAGE, "42").name == "fast-sdxl"


@pytest.mark.asyncio
async def test_setmodel_rejects_mismatch(mock_bot, mock_ctx):
    cog = ModelCommands(mock_bot)
    await cog.setmodel.callback(cog, mock_ctx, "text2image", "veo3")
    assert _replies(mock_ctx)[0].startswith("Error:")
    assert mock_bot.registry.get_current_model(Capability.TEXT2IMAGE, "42").name == "fast-sdxl"


@pytest.mark.asyncio
async def test_setmodel_usage(mock_bot, mock_ctx):
    cog = ModelCommands(mock_bot)
    await cog.setmodel.callback(cog, mock_ctx, "text2image", "")
    assert _replies(mock_ctx) == ["Usage: !setmodel <type> <model|default>"]


@pytest.mark.asyncio
async def test_listmodels_marks_current(mock_bot, mock_ctx):
    cog = ModelCommands(mock_bot)
    await cog.listmodels.callback(cog, mock_ctx, "text2image")

    text = "\n".join(_replies(mock_ctx))
    assert "• fast-sdxl (current):" in text
    assert "flux/dev" in text


@pytest.mark.asyncio
async def test_listmodels_unknown_type(mock_bot, mock_ctx):
    cog = ModelCommands(mock_bot)
    await cog.listmodels.callback(cog, mock_ctx, "text2smell")
    assert _replies(mock_ctx)[0].startswith("Error:")


@pytest.mark.asyncio
async def test_help_variants(mock_bot, mock_ctx):
    cog = ModelCommands(mock_bot)
    await cog.help.callback(cog, mock_ctx, "", "")
    assert _replies(mock_ctx) == [GENERAL_HELP]

    mock_ctx.reply.reset_mock()
    await cog.help.callback(cog, mock_ctx, "text2image", "flux/dev")
    assert _replies(mock_ctx)[0].startswith("**flux/dev**")

    mock_ctx.reply.reset_mock()
    await cog.help.callback(cog, mock_ctx, "text2image", "")
    assert "Other models:" in "\n".join(_replies(mock_ctx))


@pytest.mark.asyncio
async def test_balance(mock_bot, mock_ctx):
    await mock_bot.store.update_balance("42", dcr_to_atoms(Decimal("0.5")))
    cog = BalanceCommands(mock_bot)
    await cog.balance.callback(cog, mock_ctx)
    assert _replies(mock_ctx) == ["💰 Your Balance:\n• 0.50000000 DCR\n• $10.00 USD"]


@pytest.mark.asyncio
async def test_balance_without_rate(mock_bot, mock_ctx):
    mock_bot.rates = FixedRates(unavailable=True)
    cog = BalanceCommands(mock_bot)
    await cog.balance.callback(cog, mock_ctx)
    assert _replies(mock_ctx) == ["💰 Your Balance:\n• 0.00000000 DCR"]


@pytest.mark.asyncio
async def test_rate(mock_bot, mock_ctx):
    cog = BalanceCommands(mock_bot)
    await cog.rate.callback(cog, mock_ctx)
    assert _replies(mock_ctx) == [
        "Current DCR Exchange Rates:\nUSD: $20.00\nBTC: 0.00020000 BTC\nSource: CoinGecko"
    ]


@pytest.mark.asyncio
async def test_rate_unavailable(mock_bot, mock_ctx):
    mock_bot.rates = FixedRates(unavailable=True)
    cog = BalanceCommands(mock_bot)
    await cog.rate.callback(cog, mock_ctx)
    assert _replies(mock_ctx) == ["Unable to get the current exchange rate. Please try again later."]


@pytest.mark.asyncio
async def test_credit(mock_bot, mock_ctx):
    cog = BalanceCommands(mock_bot)
    await cog.credit.callback(cog, mock_ctx, "1234", "1.5")

    assert await mock_bot.store.get_balance("1234") == dcr_to_atoms(Decimal("1.5"))
    assert _replies(mock_ctx) == ["✅ Credited 1.50000000 DCR to 1234. New balance: 1.50000000 DCR"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "user_id,amount",
    [("", ""), ("bob", "1"), ("1234", "-1"), ("1234", "lots"), ("1234", "NaN"), ("1234", "sNaN"), ("1234", "inf")],
)
async def test_credit_usage(mock_bot, mock_ctx, user_id, amount):
    cog = BalanceCommands(mock_bot)
    await cog.credit.callback(cog, mock_ctx, user_id, amount)
    assert _replies(mock_ctx) == ["Usage: !credit <user_id> <dcr_amount>"]


@pytest.mark.asyncio
async def test_setup_commands_loads_every_cog():
    bot = MagicMock()
    bot.cogs = {}

    async def add_cog(cog):
        bot.cogs[type(cog).__name__] = cog

    bot.add_cog = AsyncMock(side_effect=add_cog)
    bot.get_cog = lambda name: bot.cogs.get(name)

    await setup_commands(bot)

    assert set(bot.cogs) == set(COMMAND_MODULES.values())
    names = {cmd.name for cog in bot.cogs.values() for cmd in cog.get_commands()}
    assert {"text2image", "transcribe", "setmodel", "balance", "credit"} <= names


def test_startup_report_lists_every_capability():
    console = Console(record=True, width=120)
    log_services_setup(console, build_registry(), {"BILLING_ENABLED": False})
    text = console.export_text()
    assert "text2image: fast-sdxl" in text
    assert "Billing disabled" in text

"""NEON companion progression.

NEON has its own currencies (loyalty points, shards), a level that costs
shards to raise, unlockable bonuses, a rolling scripted quest with a 48h
deadline, a three-step legacy questline and an adversary, SHADOW, whose
threat grows once per cooldown window and may strike the player's ledger.
"""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

from tycoon.context import GameContext
from tycoon.documents import CompanionState, NeonMessage, NeonQuest, NeonReward, ShadowAttack
from tycoon.errors import AlreadyInState, InsufficientLoyalty, InsufficientShards, NotEligible, NotFound
from tycoon.ledger.service import debit_btc, grant_item, load_account
from tycoon.store import keys
from tycoon.store.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

MAX_LEVEL = 4
SHARDS_PER_LEVEL = 20

BONUS_COSTS: dict[str, int] = {
    "overclock": 50,
    "hackShield": 100,
    "dataVault": 200,
}

QUEST_LOYALTY = 20
QUEST_SHARDS = 5

SHADOW_THREAT_STEP = 10
SHADOW_THREAT_MAX = 100
SHADOW_ATTACK_THRESHOLD = 50
SHADOW_ATTACK_CHANCE = 0.5
SHADOW_POWER_LOSS = 0.10
SHADOW_BTC_LOSS = 0.05

NEON_CORE_MULTIPLIER = 1.15


@dataclass(frozen=True)
class LegacyStep:
    description: str
    currency: str  # btc | loyalty | shards
    cost: int


LEGACY_QUESTLINE: list[LegacyStep] = [
    LegacyStep("Hack into the Crypto Exchange and retrieve a data fragment.", "btc", 50),
    LegacyStep("Join a CryptoBank Robbery event and steal a secure key.", "loyalty", 100),
    LegacyStep("Decrypt the final fragment.", "shards", 30),
]

TIPS: dict[str, str] = {
    "strategy": (
        "For the CryptoBank Robbery event, focus on upgrading your NEON level to increase "
        "success chance. Join a strong syndicate like the Crypto Kings."
    ),
    "miningPower": (
        "To boost your Mining Power, upgrade your farms to Tier 3 or buy a Quantum Miner "
        "from the Darkweb Market. Your current Mining Power is {mining_power:g} TH/s."
    ),
}
UNKNOWN_TIP = "Hmm, I'm not sure about that. Try asking something else!"


def scripted_quest(now: datetime, hours: int) -> NeonQuest:
    return NeonQuest(
        id=f"quest_{uuid.uuid4().hex[:12]}",
        description="Infiltrate the Darkweb Market and buy a Decryptor within 48 hours.",
        deadline=now + timedelta(hours=hours),
        reward=NeonReward(btc=50, mining_power=10, item="Quantum Firewall"),
    )


async def load_state(uow: UnitOfWork, account_id: str) -> CompanionState:
    state = await uow.load(keys.neon(account_id), CompanionState)
    if state is None:
        state = CompanionState()
        uow.save(keys.neon(account_id), state)
    return state


def add_message(uow: UnitOfWork, account_id: str, now: datetime, text: str, kind: str) -> NeonMessage:
    msg_id = f"{now:%Y%m%d%H%M%S%f}-{uuid.uuid4().hex[:8]}"
    message = NeonMessage(id=msg_id, message=text, type=kind, timestamp=now)
    uow.save(f"{keys.neon_messages(account_id)}{msg_id}", message)
    return message


async def get_state(ctx: GameContext, account_id: str) -> CompanionState:
    """Companion state after issuing a quest and running the SHADOW tick if due."""
    await ensure_quest(ctx, account_id)
    await shadow_tick(ctx, account_id)

    async def op(uow: UnitOfWork) -> CompanionState:
        return await load_state(uow, account_id)

    return await ctx.transact(op, account_id=account_id)


async def upgrade(ctx: GameContext, account_id: str) -> CompanionState:
    async def op(uow: UnitOfWork) -> CompanionState:
        state = await load_state(uow, account_id)
        if state.neon_level >= MAX_LEVEL:
            raise AlreadyInState("NEON is already at max level")
        cost = state.neon_level * SHARDS_PER_LEVEL
        if state.shards < cost:
            raise InsufficientShards(f"You need {cost} Shards to upgrade NEON to Level {state.neon_level + 1}")
        state.shards -= cost
        state.neon_level += 1
        uow.save(keys.neon(account_id), state)
        add_message(
            uow, account_id, ctx.clock.now(),
            f"NEON upgraded to Level {state.neon_level}! I'm now even smarter. What's next?", "reaction",
        )
        return state

    state = await ctx.transact(op, account_id=account_id)
    logger.info("Account %s upgraded NEON to level %d", account_id, state.neon_level)
    return state


async def unlock_bonus(ctx: GameContext, account_id: str, bonus_id: str) -> CompanionState:
    cost = BONUS_COSTS.get(bonus_id)
    if cost is None:
        raise NotFound(f"Unknown bonus '{bonus_id}'")

    async def op(uow: UnitOfWork) -> CompanionState:
        state = await load_state(uow, account_id)
        if bonus_id in state.unlocked_bonuses:
            raise AlreadyInState("This bonus is already unlocked")
        if state.loyalty_points < cost:
            raise InsufficientLoyalty(f"You need {cost} Loyalty Points to unlock this bonus")
        state.loyalty_points -= cost
        state.unlocked_bonuses.append(bonus_id)
        uow.save(keys.neon(account_id), state)
        add_message(uow, account_id, ctx.clock.now(), f"Bonus unlocked: {bonus_id}! You're making me proud, human.", "reaction")
        return state

    state = await ctx.transact(op, account_id=account_id)
    logger.info("Account %s unlocked NEON bonus %s", account_id, bonus_id)
    return state


async def ensure_quest(ctx: GameContext, account_id: str) -> NeonQuest | None:
    """Issue the scripted quest when no active quest has a future deadline."""

    async def op(uow: UnitOfWork) -> NeonQuest | None:
        now = ctx.clock.now()
        state = await load_state(uow, account_id)
        if any(quest.deadline > now for quest in state.active_quests):
            return None
        quest = scripted_quest(now, ctx.settings.neon_quest_hours)
        state.active_quests.append(quest)
        uow.save(keys.neon(account_id), state)
        add_message(uow, account_id, now, "New quest available: Infiltrate the Darkweb Market!", "quest")
        return quest

    return await ctx.transact(op, account_id=account_id)


async def complete_quest(ctx: GameContext, account_id: str, quest_id: str) -> CompanionState:
    """Pay out an active quest. An expired quest is removed and rejected."""

    async def op(uow: UnitOfWork) -> tuple[CompanionState, bool]:
        now = ctx.clock.now()
        state = await load_state(uow, account_id)
        quest = next((q for q in state.active_quests if q.id == quest_id), None)
        if quest is None:
            raise NotFound(f"Quest {quest_id} not found")
        state.active_quests = [q for q in state.active_quests if q.id != quest_id]

        if now > quest.deadline:
            add_message(uow, account_id, now, "Too slow, human... That quest expired. Better luck next time!", "reaction")
            uow.save(keys.neon(account_id), state)
            return state, True

        account = await load_account(ctx, uow, account_id)
        account.btc_balance += quest.reward.btc
        account.mining_power += quest.reward.mining_power
        if quest.reward.item:
            grant_item(account, quest.reward.item)
        state.loyalty_points += QUEST_LOYALTY
        state.shards += QUEST_SHARDS
        uow.save(keys.account(account_id), account)
        uow.save(keys.neon(account_id), state)
        add_message(
            uow, account_id, now,
            f"Quest completed! Reward: {quest.reward.btc:g} BTC, {quest.reward.mining_power:g} TH/s. Nice work, human!",
            "reaction",
        )
        return state, False

    state, expired = await ctx.transact(op, account_id=account_id)
    if expired:
        raise NotEligible("Too slow, human... That quest expired.")
    logger.info("Account %s completed NEON quest %s", account_id, quest_id)
    return state


async def advance_legacy(ctx: GameContext, account_id: str) -> CompanionState:
    """Pay for and complete the next legacy questline step."""

    async def op(uow: UnitOfWork) -> CompanionState:
        now = ctx.clock.now()
        state = await load_state(uow, account_id)
        progress = state.legacy_quest_progress
        if progress >= len(LEGACY_QUESTLINE):
            raise AlreadyInState("NEON's Legacy questline is already completed")
        step = LEGACY_QUESTLINE[progress]

        if step.currency == "btc":
            account = await load_account(ctx, uow, account_id)
            debit_btc(account, step.cost)
            uow.save(keys.account(account_id), account)
        elif step.currency == "loyalty":
            if state.loyalty_points < step.cost:
                raise InsufficientLoyalty(f"You need {step.cost} Loyalty Points to proceed with this quest")
            state.loyalty_points -= step.cost
        else:
            if state.shards < step.cost:
                raise InsufficientShards(f"You need {step.cost} NEON Shards to proceed with this quest")
            state.shards -= step.cost

        state.legacy_quest_progress = progress + 1
        if state.legacy_quest_progress == len(LEGACY_QUESTLINE):
            account = await load_account(ctx, uow, account_id)
            account.mining_power_multiplier = NEON_CORE_MULTIPLIER
            uow.save(keys.account(account_id), account)
            add_message(
                uow, account_id, now,
                "We did it, human! I've unlocked the NEON Core: +15% Mining Power!", "reaction",
            )
        else:
            add_message(
                uow, account_id, now,
                f"Step {progress + 1} completed! Next: {LEGACY_QUESTLINE[progress + 1].description}", "quest",
            )
        uow.save(keys.neon(account_id), state)
        return state

    state = await ctx.transact(op, account_id=account_id)
    logger.info("Account %s reached legacy step %d", account_id, state.legacy_quest_progress)
    return state


async def shadow_tick(ctx: GameContext, account_id: str) -> ShadowAttack | None:
    """Raise SHADOW's threat once per cooldown window and maybe attack."""

    async def op(uow: UnitOfWork) -> ShadowAttack | None:
        now = ctx.clock.now()
        state = await load_state(uow, account_id)
        if state.shadow_attack_cooldown is not None and state.shadow_attack_cooldown >= now:
            return None
        state.shadow_threat_level = min(SHADOW_THREAT_MAX, state.shadow_threat_level + SHADOW_THREAT_STEP)
        state.shadow_attack_cooldown = now + timedelta(hours=ctx.settings.shadow_cooldown_hours)
        uow.save(keys.neon(account_id), state)

        rng = ctx.rng.stream("neon.shadow")
        if state.shadow_threat_level < SHADOW_ATTACK_THRESHOLD or rng.random() >= SHADOW_ATTACK_CHANCE:
            return None

        account = await load_account(ctx, uow, account_id)
        if rng.random() < 0.5:
            attack_type = "miningPowerReduction"
            damage = math.floor(account.mining_power * SHADOW_POWER_LOSS)
            account.mining_power = max(0.0, account.mining_power - damage)
            text = f"SHADOW attacked! Your Mining Power decreased by {damage} TH/s. We need to fight back!"
        else:
            attack_type = "btcTheft"
            damage = math.floor(account.btc_balance * SHADOW_BTC_LOSS)
            account.btc_balance = max(0.0, account.btc_balance - damage)
            text = f"SHADOW stole {damage} BTC from you! This is getting serious, human."
        uow.save(keys.account(account_id), account)

        attack = ShadowAttack(id=uuid.uuid4().hex, attack_type=attack_type, damage=damage, timestamp=now)
        uow.save(f"{keys.shadow_attacks(account_id)}{now:%Y%m%d%H%M%S%f}-{attack.id[:8]}", attack)
        add_message(uow, account_id, now, text, "reaction")
        return attack

    attack = await ctx.transact(op, account_id=account_id)
    if attack is not None:
        logger.info("SHADOW hit account %s (%s, damage %g)", account_id, attack.attack_type, attack.damage)
    return attack


async def counter_shadow(ctx: GameContext, account_id: str) -> CompanionState:
    async def op(uow: UnitOfWork) -> CompanionState:
        state = await load_state(uow, account_id)
        if state.shadow_threat_level == 0:
            raise NotEligible("No SHADOW threat to counter")
        cost = state.shadow_threat_level // 2
        if state.shards < cost:
            raise InsufficientShards(f"You need {cost} NEON Shards to counter SHADOW")
        state.shards -= cost
        state.shadow_threat_level = 0
        uow.save(keys.neon(account_id), state)
        add_message(uow, account_id, ctx.clock.now(), "SHADOW threat neutralized! That pest won't bother us for a while.", "reaction")
        return state

    return await ctx.transact(op, account_id=account_id)


async def ask(ctx: GameContext, account_id: str, topic: str) -> NeonMessage:
    """Answer a player question with a canned tip."""

    async def op(uow: UnitOfWork) -> NeonMessage:
        account = await load_account(ctx, uow, account_id)
        template = TIPS.get(topic)
        text = template.format(mining_power=account.mining_power) if template else UNKNOWN_TIP
        return add_message(uow, account_id, ctx.clock.now(), text, "tip")

    return await ctx.transact(op, account_id=account_id)


async def list_messages(ctx: GameContext, account_id: str, limit: int = 50) -> list[NeonMessage]:
    docs = await ctx.store.children(keys.neon_messages(account_id))
    messages = [NeonMessage.model_validate(doc.value) for doc in docs]
    return list(reversed(messages))[:limit]


async def list_attacks(ctx: GameContext, account_id: str) -> list[ShadowAttack]:
    docs = await ctx.store.children(keys.shadow_attacks(account_id))
    return [ShadowAttack.model_validate(doc.value) for doc in reversed(docs)]

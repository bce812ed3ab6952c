"""Cyber Arena wave-defense run.

State progression: preparation(N) -> active(N) -> preparation(N+1) | complete | failed
A run lives only in memory. ``tick`` advances one fixed step; it performs no
I/O. Rewards accumulate on the run and are persisted once, after the run
reaches a terminal phase.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field

from tycoon.documents import LootBundle
from tycoon.errors import NotEligible, NotFound

PREPARATION = "preparation"
ACTIVE = "active"
COMPLETE = "complete"
FAILED = "failed"
TERMINAL_PHASES = frozenset({COMPLETE, FAILED})

WAVE_SIZES = [5, 8, 10]
MAX_CORE_HP = 100.0

LASER_DAMAGE = 5.0
LASER_COOLDOWN = 2.0
OVERCLOCKED_LASER_COOLDOWN = 1.0
OVERCLOCK_DURATION = 10.0
ABILITY_COOLDOWN = 30.0
HACK_SHIELD_HP = 20.0

TIME_SLOW_DURATION = 5.0
TIME_SLOW_FACTOR = 0.5
HP_BOOST = 30.0
POWER_UP_CHANCE = 0.5
POWER_UP_MAX_POSITION = 80.0

BONUSES = ("damageBoost", "speedBoost", "hpRegen")
POWER_UP_TYPES = ("areaBlast", "timeSlow", "hpBoost")

WAVE_REWARD = LootBundle(btc=10, shards=5)
FINAL_REWARD = LootBundle(btc=50, shards=10, items=["SHADOW Core"])


@dataclass(frozen=True)
class DroneStats:
    hp: float
    speed: float
    damage: float


DRONE_TYPES: dict[str, DroneStats] = {
    "fast": DroneStats(hp=8, speed=3, damage=5),
    "armored": DroneStats(hp=20, speed=1, damage=15),
    "suicide": DroneStats(hp=5, speed=2.5, damage=20),
}


@dataclass
class Drone:
    id: str
    type: str
    hp: float
    speed: float
    damage: float
    position: float = 0.0

    @classmethod
    def spawn(cls, drone_id: str, drone_type: str) -> Drone:
        stats = DRONE_TYPES[drone_type]
        return cls(id=drone_id, type=drone_type, hp=stats.hp, speed=stats.speed, damage=stats.damage)


@dataclass
class PowerUp:
    id: str
    type: str
    position: float


def draw_drone_type(rng: random.Random) -> str:
    """Uniform draw into thirds."""
    roll = rng.random()
    if roll < 1 / 3:
        return "fast"
    if roll < 2 / 3:
        return "armored"
    return "suicide"


def add_loot(total: LootBundle, extra: LootBundle) -> LootBundle:
    return LootBundle(
        btc=total.btc + extra.btc,
        shards=total.shards + extra.shards,
        items=[*total.items, *extra.items],
    )


@dataclass
class ArenaRun:
    drone_rng: random.Random
    power_up_rng: random.Random
    unlocked_bonuses: frozenset[str] = frozenset()
    tick_seconds: float = 0.1
    phase: str = PREPARATION
    wave: int = 0
    data_core_hp: float = MAX_CORE_HP
    drones: list[Drone] = field(default_factory=list)
    power_ups: list[PowerUp] = field(default_factory=list)
    bonus: str | None = None
    laser_cooldown: float = 0.0
    overclock_remaining: float = 0.0
    overclock_cooldown: float = 0.0
    hack_shield_cooldown: float = 0.0
    time_slow_remaining: float = 0.0
    waves_completed: int = 0
    rewards: LootBundle = field(default_factory=LootBundle)
    events: list[str] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.phase in TERMINAL_PHASES

    @property
    def damage_modifier(self) -> float:
        return 1.5 if self.bonus == "damageBoost" else 1.0

    @property
    def speed_modifier(self) -> float:
        modifier = 0.8 if self.bonus == "speedBoost" else 1.0
        if self.time_slow_remaining > 0:
            modifier *= TIME_SLOW_FACTOR
        return modifier

    def _require_phase(self, phase: str) -> None:
        if self.phase != phase:
            raise NotEligible(f"Arena is in {self.phase} phase, expected {phase}")

    # --- Preparation ---

    def select_bonus(self, bonus: str) -> None:
        self._require_phase(PREPARATION)
        if bonus not in BONUSES:
            raise NotFound(f"Unknown arena bonus '{bonus}'")
        self.bonus = bonus

    def start_wave(self) -> None:
        self._require_phase(PREPARATION)
        if self.bonus is None:
            raise NotEligible("Choose a bonus before the wave starts")
        self.wave += 1
        self.drones = [
            Drone.spawn(f"drone_{self.wave}_{i}", draw_drone_type(self.drone_rng))
            for i in range(WAVE_SIZES[self.wave - 1])
        ]
        if self.power_up_rng.random() < POWER_UP_CHANCE:
            self.power_ups.append(PowerUp(
                id=f"powerup_{self.wave}",
                type=self.power_up_rng.choice(POWER_UP_TYPES),
                position=self.power_up_rng.uniform(0, POWER_UP_MAX_POSITION),
            ))
        self.phase = ACTIVE
        self.events.append(f"Wave {self.wave} incoming! New enemies detected!")

    # --- Player actions while active ---

    def frontmost_drone(self) -> Drone | None:
        if not self.drones:
            return None
        return max(self.drones, key=lambda drone: drone.position)

    def fire_laser(self) -> Drone:
        """Hit the frontmost drone. Returns the drone that was hit."""
        self._require_phase(ACTIVE)
        if self.laser_cooldown > 0:
            raise NotEligible("Laser is recharging")
        target = self.frontmost_drone()
        if target is None:
            raise NotEligible("No drones to target")
        self.laser_cooldown = OVERCLOCKED_LASER_COOLDOWN if self.overclock_remaining > 0 else LASER_COOLDOWN
        target.hp -= LASER_DAMAGE * self.damage_modifier
        if target.hp <= 0:
            self.drones.remove(target)
        return target

    def activate_overclock(self) -> None:
        self._require_phase(ACTIVE)
        if "overclock" not in self.unlocked_bonuses:
            raise NotEligible("Unlock the overclock bonus first")
        if self.overclock_cooldown > 0:
            raise NotEligible("Overclock is on cooldown")
        self.overclock_remaining = OVERCLOCK_DURATION
        self.overclock_cooldown = ABILITY_COOLDOWN
        self.events.append("Overclock activated! Attack speed increased!")

    def activate_hack_shield(self) -> None:
        self._require_phase(ACTIVE)
        if "hackShield" not in self.unlocked_bonuses:
            raise NotEligible("Unlock the hack shield bonus first")
        if self.hack_shield_cooldown > 0:
            raise NotEligible("Hack Shield is on cooldown")
        self.data_core_hp = min(MAX_CORE_HP, self.data_core_hp + HACK_SHIELD_HP)
        self.hack_shield_cooldown = ABILITY_COOLDOWN
        self.events.append("Hack Shield activated! Data Core HP restored by 20!")

    def pick_power_up(self, power_up_id: str) -> PowerUp:
        self._require_phase(ACTIVE)
        power_up = next((p for p in self.power_ups if p.id == power_up_id), None)
        if power_up is None:
            raise NotFound(f"Power-up {power_up_id} not found")
        self.power_ups.remove(power_up)
        if power_up.type == "areaBlast":
            self.drones = []
            self.events.append("Area Blast activated! All drones destroyed!")
        elif power_up.type == "timeSlow":
            self.time_slow_remaining = TIME_SLOW_DURATION
            self.events.append("Time Slow activated! Drones slowed for 5 seconds!")
        else:
            self.data_core_hp = min(MAX_CORE_HP, self.data_core_hp + HP_BOOST)
            self.events.append("HP Boost activated! Data Core HP restored by 30!")
        return power_up

    # --- Loop ---

    def tick(self) -> None:
        """Advance one fixed step. A no-op outside the active phase."""
        if self.phase != ACTIVE:
            return
        step = self.tick_seconds
        self.laser_cooldown = max(0.0, self.laser_cooldown - step)
        self.overclock_remaining = max(0.0, self.overclock_remaining - step)
        self.overclock_cooldown = max(0.0, self.overclock_cooldown - step)
        self.hack_shield_cooldown = max(0.0, self.hack_shield_cooldown - step)

        speed_modifier = self.speed_modifier
        self.time_slow_remaining = max(0.0, self.time_slow_remaining - step)
        for drone in self.drones:
            drone.position = min(100.0, drone.position + drone.speed * speed_modifier)
        reached = [drone for drone in self.drones if drone.position >= 100]
        if reached:
            self.data_core_hp = max(0.0, self.data_core_hp - sum(drone.damage for drone in reached))
            self.drones = [drone for drone in self.drones if drone.position < 100]

        if self.data_core_hp <= 0:
            self.phase = FAILED
            self.events.append("The Data Core was destroyed! Better luck next time, human.")
            return
        if not self.drones:
            self._clear_wave()
            return
        if self.bonus == "hpRegen":
            self.data_core_hp = min(MAX_CORE_HP, self.data_core_hp + 0.5)

    def _clear_wave(self) -> None:
        self.waves_completed += 1
        self.rewards = add_loot(self.rewards, WAVE_REWARD)
        self.power_ups = []
        self.events.append(
            f"Wave {self.wave} cleared! Reward: {WAVE_REWARD.btc:g} BTC, {WAVE_REWARD.shards} Shards."
        )
        if self.wave < len(WAVE_SIZES):
            self.phase = PREPARATION
            self.bonus = None
            return
        self.rewards = add_loot(self.rewards, FINAL_REWARD)
        self.phase = COMPLETE
        self.events.append("Cyber Arena completed! SHADOW Core acquired!")

    def abandon(self) -> None:
        """End a run that was left idle; only already cleared waves pay out."""
        if not self.is_terminal:
            self.phase = FAILED
            self.events.append("Connection to the arena lost.")

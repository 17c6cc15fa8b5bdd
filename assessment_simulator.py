#!/usr/bin/env python3
"""
Assessment Simulator for the MND Playbook API

This script replays synthetic monthly ALSFRS-R check-ins against a running
playbook API. Each simulated patient follows an onset pathway (lower-limb or
bulbar) and declines month by month; the stage suggestions the API returns
are printed live in the terminal.
"""

import asyncio
import random
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import httpx
from colorama import init, Fore, Style

from playbook.config import CLIENT
from playbook.questionnaire_specs import DOMAIN_QUESTIONS, QUESTION_KEYS

# Initialize colorama for colored terminal output
init(autoreset=True)

LEVEL_COLORS = {
    "urgent": Fore.RED,
    "recommended": Fore.YELLOW,
    "suggested": Fore.CYAN,
    "info": Fore.GREEN,
}

# Monthly chance that a question drops by one point
FAST_DECLINE = 0.35
SLOW_DECLINE = 0.08


@dataclass
class PatientProfile:
    """A synthetic patient: onset pathway and per-question monthly decline chance"""
    name: str
    onset: str
    decline_rates: Dict[str, float] = field(default_factory=dict)

    def rate(self, question_id: str) -> float:
        return self.decline_rates.get(question_id, SLOW_DECLINE)


def limb_onset_profile(name: str = "Limb onset") -> PatientProfile:
    fast = ("walking", "climbing_stairs", "turning_in_bed", "dressing")
    return PatientProfile(name=name, onset="lower-limb", decline_rates={q: FAST_DECLINE for q in fast})


def bulbar_onset_profile(name: str = "Bulbar onset") -> PatientProfile:
    return PatientProfile(
        name=name,
        onset="bulbar",
        decline_rates={q: FAST_DECLINE for q in DOMAIN_QUESTIONS["bulbar"] + ("handwriting",)},
    )


def generate_trajectory(profile: PatientProfile, months: int, seed: Optional[int] = None) -> List[Dict[str, int]]:
    """
    Monthly answer sets starting from a normal baseline (all 4s).
    Scores never recover and never drop below 0.
    """
    rng = random.Random(seed)
    answers = {q: 4 for q in QUESTION_KEYS}
    trajectory = [dict(answers)]
    for _ in range(months - 1):
        for q in QUESTION_KEYS:
            if answers[q] > 0 and rng.random() < profile.rate(q):
                answers[q] -= 1
        trajectory.append(dict(answers))
    return trajectory


class AssessmentSimulator:
    """Submits a simulated patient's monthly assessments to the playbook API"""

    def __init__(self, api_url: str = CLIENT["api_url"], delay: float = 0.5):
        self.api_url = api_url
        self.delay = delay

    async def submit_assessment(self, answers: Dict[str, int], assessed_at: datetime) -> Optional[dict]:
        """Post one assessment and return the API's result"""
        try:
            async with httpx.AsyncClient(timeout=CLIENT["timeout"]) as client:
                response = await client.post(
                    f"{self.api_url}/assessments",
                    json={"answers": answers, "date": assessed_at.isoformat()},
                )
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as e:
            print(f"{Fore.RED}Error connecting to playbook API: {e}")
            return None

    def print_result(self, month: int, result: dict):
        """Print scores and stage suggestions with color coding"""
        timestamp = time.strftime("%H:%M:%S")
        scores = result["scores"]
        print(f"{Fore.YELLOW}[{timestamp}] {Fore.CYAN}MONTH {month}:{Style.RESET_ALL} "
              f"total {scores['total']['score']}/48 "
              f"(bulbar {scores['bulbar']['score']}, motor {scores['motor']['score']}, "
              f"respiratory {scores['respiratory']['score']})")
        for trigger in result["triggers"]:
            color = LEVEL_COLORS.get(trigger["alert_level"], Fore.WHITE)
            print(f"    {color}{trigger['alert_level'].upper():<12}{Style.RESET_ALL}"
                  f"{trigger['stage_id']} {trigger['message']}")
        print()

    async def simulate_patient(self, profile: PatientProfile, months: int = 12,
                               seed: Optional[int] = None) -> List[dict]:
        """Replay a full trajectory, one assessment per month"""
        # At least one check-in, and never dated in the future
        months = max(1, months)
        print(f"{Fore.MAGENTA}{'='*60}")
        print(f"{Fore.MAGENTA}SIMULATING: {profile.name} ({profile.onset} pathway, {months} months)")
        print(f"{Fore.MAGENTA}{'='*60}")

        results = []
        start = datetime.now(timezone.utc) - timedelta(days=30 * (months - 1))
        for month, answers in enumerate(generate_trajectory(profile, months, seed), start=1):
            result = await self.submit_assessment(answers, start + timedelta(days=30 * (month - 1)))
            if result is None:
                print(f"{Fore.RED}Simulation stopped at month {month}")
                break
            results.append(result)
            self.print_result(month, result)
            await asyncio.sleep(self.delay)

        print(f"{Fore.MAGENTA}SIMULATION COMPLETED ({len(results)} assessments stored)")
        return results


async def main():
    """Main function to run the assessment simulator"""
    print(f"{Fore.CYAN}MND Playbook Assessment Simulator")
    print(f"{Fore.CYAN}{'='*40}")
    print("1. Limb onset")
    print("2. Bulbar onset")
    choice = input("Select onset pathway (1-2): ").strip()
    profile = bulbar_onset_profile() if choice == "2" else limb_onset_profile()

    months = input("Number of months to simulate (default 12): ").strip()
    simulator = AssessmentSimulator()
    await simulator.simulate_patient(profile, months=int(months) if months.isdigit() else 12)


if __name__ == "__main__":
    asyncio.run(main())

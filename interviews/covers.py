from __future__ import annotations  # Cover image assignment for new interviews

import random
from typing import Optional, Sequence

INTERVIEW_COVERS: Sequence[str] = (
    "/covers/adobe.png",
    "/covers/amazon.png",
    "/covers/facebook.png",
    "/covers/hostinger.png",
    "/covers/pinterest.png",
    "/covers/quora.png",
    "/covers/reddit.png",
    "/covers/skype.png",
    "/covers/spotify.png",
    "/covers/telegram.png",
    "/covers/tiktok.png",
    "/covers/yahoo.png",
)


def random_interview_cover(rng: Optional[random.Random] = None) -> str:
    return (rng or random).choice(INTERVIEW_COVERS)


__all__ = ["INTERVIEW_COVERS", "random_interview_cover"]

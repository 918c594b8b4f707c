"""
FastAPI backend pipeline for the real-time form coach.

Processes streamed pose frames one at a time:
    Stage 1: Frame parsing & visibility gating
    Stage 2: Form validation & scoring (per-exercise rules)
    Stage 3: Phase detection & rep counting
    Stage 4: Session recording & voice announcements
"""

"""
Pose landmark model and safe accessors.

Frames follow the MediaPipe Pose layout: 33 landmarks per frame with a fixed
index-to-joint mapping. Coordinates are normalized to the image (x, y in
[0, 1], y growing downwards); ``visibility`` is the estimator's confidence.
"""

from enum import IntEnum
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

NUM_LANDMARKS: int = 33
DEFAULT_VISIBILITY_THRESHOLD: float = 0.5


class PoseLandmark(IntEnum):
    """MediaPipe Pose landmark indices."""
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


class Landmark(BaseModel):
    """One estimated 3D joint position."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    z: float = 0.0
    visibility: Optional[float] = Field(default=None, ge=0.0, le=1.0)


# A frame is the ordered landmark set at one instant. Entries may be None when
# the estimator dropped a joint.
Frame = Sequence[Optional[Landmark]]


def get_landmark(frame: Optional[Frame], index: int) -> Optional[Landmark]:
    """Return the landmark at *index*, or None if out of bounds or absent."""
    if not frame:
        return None
    if 0 <= index < len(frame):
        return frame[index]
    return None


def is_visible(
    landmark: Optional[Landmark],
    threshold: float = DEFAULT_VISIBILITY_THRESHOLD,
) -> bool:
    """True iff the landmark exists and its visibility exceeds *threshold*.

    A missing visibility value counts as fully visible.
    """
    if landmark is None:
        return False
    visibility = 1.0 if landmark.visibility is None else landmark.visibility
    return visibility > threshold


def visible_landmarks(
    frame: Optional[Frame],
    indices: Sequence[int],
    threshold: float = DEFAULT_VISIBILITY_THRESHOLD,
) -> Optional[list[Landmark]]:
    """Look up several joints at once.

    Returns:
        List of landmarks in the order of *indices*, or None if any of them
        is missing or fails the visibility gate.
    """
    found = []
    for index in indices:
        landmark = get_landmark(frame, index)
        if not is_visible(landmark, threshold):
            return None
        found.append(landmark)
    return found


def frame_from_rows(rows: Sequence[Sequence[float]]) -> list[Landmark]:
    """Build a frame from raw ``[x, y, z]`` or ``[x, y, z, visibility]`` rows.

    Args:
        rows: One row per landmark, in MediaPipe index order.

    Returns:
        List of Landmark objects.

    Raises:
        ValueError: If the frame does not hold 33 rows or a row is malformed.
    """
    if len(rows) != NUM_LANDMARKS:
        raise ValueError(
            f"Expected {NUM_LANDMARKS} landmarks per frame, got {len(rows)}."
        )

    frame: list[Landmark] = []
    for i, row in enumerate(rows):
        if len(row) not in (3, 4):
            raise ValueError(
                f"Landmark {i} must have 3 or 4 values (x, y, z[, visibility]), "
                f"got {len(row)}."
            )
        visibility = float(row[3]) if len(row) == 4 else None
        if visibility is not None:
            # Estimators occasionally report values a hair outside [0, 1]
            visibility = min(1.0, max(0.0, visibility))
        frame.append(
            Landmark(x=float(row[0]), y=float(row[1]), z=float(row[2]), visibility=visibility)
        )
    return frame

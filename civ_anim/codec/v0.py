"""
Uncompressed V0 keyframes.

From 0x60, ten float32 per bone per frame:
    qw qx qy qz  px py pz  sx sy sz
Poses are in bone-local space.
"""

from typing import List

import numpy as np

from civ_anim.codec.animation import Keyframe, Pose
from civ_anim.codec.errors import InconsistentError, TruncatedError
from civ_anim.codec.header import HEADER_SIZE
from civ_anim.config import DecoderConfig

FLOATS_PER_BONE = 10
_KEYFRAME_DTYPE = np.dtype('<f4')


def decode_v0_keyframes(data, frame_count: int, bone_count: int,
                        config: DecoderConfig) -> List[Pose]:
    """
    Decode raw V0 keyframes.

    Raises:
        InconsistentError: No frames, no bones or an implausible bone count
        TruncatedError: Blob shorter than the keyframe block
    """
    if frame_count == 0 or bone_count == 0:
        raise InconsistentError(f"V0 animation has {frame_count} frames and {bone_count} bones")
    if bone_count >= config.max_v0_bone_count:
        raise InconsistentError(f"V0 bone count {bone_count} exceeds {config.max_v0_bone_count}")
    if frame_count > config.max_frame_count:
        raise InconsistentError(f"Frame count {frame_count} exceeds {config.max_frame_count}")

    value_count = frame_count * bone_count * FLOATS_PER_BONE
    expected = HEADER_SIZE + value_count * 4
    if len(data) < expected:
        raise TruncatedError(f"V0 keyframes need {expected} bytes, blob has {len(data)}", HEADER_SIZE)

    values = np.frombuffer(data, dtype=_KEYFRAME_DTYPE, count=value_count, offset=HEADER_SIZE)
    values = values.astype(np.float64).reshape(frame_count, bone_count, FLOATS_PER_BONE)

    keyframes: List[Pose] = []
    for frame in values.tolist():
        keyframes.append([
            Keyframe(
                rotation=(v[0], v[1], v[2], v[3]),
                position=(v[4], v[5], v[6]),
                scale=(v[7], v[8], v[9]),
            )
            for v in frame
        ])
    return keyframes

"""
Animation data structures produced by the codec.

Rotations are (w, x, y, z) quaternions throughout, except BoneRestPose
which keeps the skeleton's (x, y, z, w) convention.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Dict, Optional, Tuple

import numpy as np

from civ_anim.codec.errors import FormatError

Vec3 = Tuple[float, float, float]
Quat = Tuple[float, float, float, float]

IDENTITY_ROTATION: Quat = (1.0, 0.0, 0.0, 0.0)
ZERO_POSITION: Vec3 = (0.0, 0.0, 0.0)
UNIT_SCALE: Vec3 = (1.0, 1.0, 1.0)


class FormatVersion(IntEnum):
    """Keyframe layout of an animation blob."""
    V0 = 0  # raw 10-float keyframes, local space
    V1 = 1  # AC11 compressed, world space


class ChannelKind(IntEnum):
    """Per-bone classification of one channel group."""
    IDENTITY = 0
    CONSTANT = 1
    ANIMATED = 2


class ChannelGroup(IntEnum):
    """Channel groups, in the order they appear in the blob."""
    ROTATION = 0
    POSITION = 1
    SCALE = 2


@dataclass(frozen=True)
class BoneRestPose:
    """Rest-pose world transform of one skeleton bone."""
    parent_index: int = -1
    world_position: Vec3 = ZERO_POSITION
    world_rotation: Quat = (0.0, 0.0, 0.0, 1.0)  # x, y, z, w


@dataclass
class Keyframe:
    """Transform for a single bone at a single frame."""
    rotation: Quat = IDENTITY_ROTATION
    position: Vec3 = ZERO_POSITION
    scale: Vec3 = UNIT_SCALE

    def copy(self) -> 'Keyframe':
        return Keyframe(self.rotation, self.position, self.scale)

    def to_dict(self) -> Dict:
        return {
            'rotation': list(self.rotation),
            'position': list(self.position),
            'scale': list(self.scale),
        }


Pose = List[Keyframe]


@dataclass
class ParsedAnimation:
    """
    A decoded animation.

    keyframes[frame][bone] holds the pose; it is None when the header was
    readable but the keyframe data failed a structural check, in which case
    decode_error says why.
    """
    fps: float
    frame_count: int
    bone_count: int
    duration: float
    name: str = ""
    is_v0: bool = False
    is_world_space: bool = True
    keyframes: Optional[List[Pose]] = None
    decode_error: Optional[FormatError] = None

    @property
    def has_keyframes(self) -> bool:
        return self.keyframes is not None

    def get_pose(self, frame: int) -> Optional[Pose]:
        """
        Get the pose at a frame index.

        Args:
            frame: Frame index, clamped to the valid range

        Returns:
            The pose, or None when keyframes are unavailable
        """
        if not self.keyframes:
            return None
        frame = max(0, min(frame, len(self.keyframes) - 1))
        return self.keyframes[frame]

    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Pack the keyframes into dense arrays.

        Returns:
            (rotations[F, B, 4], positions[F, B, 3], scales[F, B, 3]) as float64

        Raises:
            ValueError: If no keyframes were decoded
        """
        if self.keyframes is None:
            raise ValueError("Animation has no decoded keyframes")

        frames = len(self.keyframes)
        bones = len(self.keyframes[0]) if frames else 0
        rotations = np.zeros((frames, bones, 4), dtype=np.float64)
        positions = np.zeros((frames, bones, 3), dtype=np.float64)
        scales = np.ones((frames, bones, 3), dtype=np.float64)

        for f, pose in enumerate(self.keyframes):
            for b, kf in enumerate(pose):
                rotations[f, b] = kf.rotation
                positions[f, b] = kf.position
                scales[f, b] = kf.scale

        return rotations, positions, scales

    def to_dict(self) -> Dict:
        """Convert metadata to a dictionary for JSON serialization."""
        return {
            'name': self.name,
            'fps': self.fps,
            'frame_count': self.frame_count,
            'bone_count': self.bone_count,
            'duration': self.duration,
            'is_v0': self.is_v0,
            'is_world_space': self.is_world_space,
            'has_keyframes': self.has_keyframes,
            'decode_error': str(self.decode_error) if self.decode_error else None,
        }


@dataclass
class ChannelClassification:
    """Per-bone channel kinds for each group, with tallies."""
    rotation: List[ChannelKind] = field(default_factory=list)
    position: List[ChannelKind] = field(default_factory=list)
    scale: List[ChannelKind] = field(default_factory=list)

    def group(self, group: ChannelGroup) -> List[ChannelKind]:
        return (self.rotation, self.position, self.scale)[group]

    def count(self, group: ChannelGroup, kind: ChannelKind) -> int:
        return sum(1 for k in self.group(group) if k == kind)

    @property
    def animated_counts(self) -> Tuple[int, int, int]:
        return tuple(self.count(g, ChannelKind.ANIMATED) for g in ChannelGroup)

    @property
    def constant_counts(self) -> Tuple[int, int, int]:
        return tuple(self.count(g, ChannelKind.CONSTANT) for g in ChannelGroup)

    @property
    def total_animated(self) -> int:
        return sum(self.animated_counts)


@dataclass
class ConstantTables:
    """Constant channel values in allocation order."""
    rotations: List[Quat] = field(default_factory=list)
    positions: List[Vec3] = field(default_factory=list)
    scales: List[Vec3] = field(default_factory=list)


@dataclass(frozen=True)
class Segment:
    """A frame range sharing one set of bit widths."""
    index: int
    frame_start: int
    frame_end: int  # exclusive
    animated_bits: int
    rot_check: int
    other_check: int
    body_offset: int  # relative to the V1 base

    @property
    def frame_count(self) -> int:
        return self.frame_end - self.frame_start


@dataclass(frozen=True)
class AnimatedChannelHeader:
    """Dequantization parameters of one animated channel."""
    offset: Vec3
    scale: Vec3

    def dequantize(self, quantized: Tuple[int, int, int], bit_width: int) -> Vec3:
        """Map a quantized triplet back to floats."""
        if bit_width == 0:
            return self.offset
        max_q = (1 << bit_width) - 1
        return (
            self.offset[0] + (quantized[0] / max_q) * self.scale[0],
            self.offset[1] + (quantized[1] / max_q) * self.scale[1],
            self.offset[2] + (quantized[2] / max_q) * self.scale[2],
        )


@dataclass
class DecodedSegment:
    """Dequantized samples of one segment: samples[frame][channel]."""
    segment: Segment
    bit_widths: List[int]
    samples: List[List[Vec3]] = field(default_factory=list)

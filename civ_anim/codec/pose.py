"""
Pose reconstruction for V1 animations.

Merges channel classification, constant tables, decoded animated samples
and the skeleton rest pose into one world-space pose per frame.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from civ_anim.codec.animation import (
    BoneRestPose,
    ChannelClassification,
    ChannelGroup,
    ChannelKind,
    ConstantTables,
    DecodedSegment,
    IDENTITY_ROTATION,
    Keyframe,
    Pose,
    UNIT_SCALE,
    ZERO_POSITION,
)
from civ_anim.codec.constant_table import POSITION_SCALE
from civ_anim.codec.quat import from_smallest_three, from_xyzw, normalize

# (kind, index): index into the constant table or animated channel list,
# or the bone index for identity channels
ChannelSource = Tuple[ChannelKind, int]


@dataclass
class ChannelMap:
    """Where each bone's channels come from, and which bone each animated channel drives."""
    rotation: List[ChannelSource] = field(default_factory=list)
    position: List[ChannelSource] = field(default_factory=list)
    scale: List[ChannelSource] = field(default_factory=list)
    channel_to_bone: List[Tuple[int, ChannelGroup]] = field(default_factory=list)


def build_channel_map(classification: ChannelClassification, bone_count: int,
                      const_scale_count: int) -> ChannelMap:
    """
    Assign constant and animated slots to bones in bone order.

    When the constant scale table holds one entry per bone it is indexed by
    bone index; otherwise constant scales are allocated in order like the
    other groups.
    """
    channel_map = ChannelMap()
    const_rot = const_pos = const_scale = 0
    anim_rot = anim_pos = anim_scale = 0
    scale_per_bone = const_scale_count == bone_count

    for b in range(bone_count):
        kind = classification.rotation[b]
        if kind == ChannelKind.CONSTANT:
            channel_map.rotation.append((kind, const_rot))
            const_rot += 1
        elif kind == ChannelKind.ANIMATED:
            channel_map.rotation.append((kind, anim_rot))
            anim_rot += 1
        else:
            channel_map.rotation.append((ChannelKind.IDENTITY, b))

        kind = classification.position[b]
        if kind == ChannelKind.CONSTANT:
            channel_map.position.append((kind, const_pos))
            const_pos += 1
        elif kind == ChannelKind.ANIMATED:
            channel_map.position.append((kind, anim_pos))
            anim_pos += 1
        else:
            channel_map.position.append((ChannelKind.IDENTITY, b))

        kind = classification.scale[b]
        if kind == ChannelKind.ANIMATED:
            channel_map.scale.append((kind, anim_scale))
            anim_scale += 1
        elif scale_per_bone:
            channel_map.scale.append((ChannelKind.CONSTANT, b))
        elif kind == ChannelKind.CONSTANT:
            channel_map.scale.append((kind, const_scale))
            const_scale += 1
        else:
            channel_map.scale.append((ChannelKind.IDENTITY, b))

    # animated channel order: rotations, positions, scales
    channel_to_bone: List[Optional[Tuple[int, ChannelGroup]]] = [None] * (anim_rot + anim_pos + anim_scale)
    for b in range(bone_count):
        kind, idx = channel_map.rotation[b]
        if kind == ChannelKind.ANIMATED:
            channel_to_bone[idx] = (b, ChannelGroup.ROTATION)
        kind, idx = channel_map.position[b]
        if kind == ChannelKind.ANIMATED:
            channel_to_bone[anim_rot + idx] = (b, ChannelGroup.POSITION)
        kind, idx = channel_map.scale[b]
        if kind == ChannelKind.ANIMATED:
            channel_to_bone[anim_rot + anim_pos + idx] = (b, ChannelGroup.SCALE)
    channel_map.channel_to_bone = channel_to_bone

    return channel_map


class PoseReconstructor:
    """
    Builds per-frame world-space poses for a V1 animation.

    Usage:
        reconstructor = PoseReconstructor(classification, constants, bone_count, rest_pose)
        keyframes = reconstructor.reconstruct(frame_count, decoded_segments)
    """

    def __init__(self, classification: ChannelClassification, constants: ConstantTables,
                 bone_count: int, rest_pose: Optional[Sequence[BoneRestPose]] = None):
        self.classification = classification
        self.constants = constants
        self.bone_count = bone_count
        self.rest_pose = rest_pose
        self.channel_map = build_channel_map(classification, bone_count, len(constants.scales))
        self.base_pose = self._build_base_pose()

    def _rest(self, bone: int) -> Optional[BoneRestPose]:
        if self.rest_pose is not None and bone < len(self.rest_pose):
            return self.rest_pose[bone]
        return None

    def _build_base_pose(self) -> Pose:
        """Pose shared by every frame before animated channels are applied."""
        constants = self.constants
        base: Pose = []

        for b in range(self.bone_count):
            rest = self._rest(b)

            kind, idx = self.channel_map.rotation[b]
            if kind == ChannelKind.CONSTANT and idx < len(constants.rotations):
                rotation = constants.rotations[idx]
            elif rest is not None:
                rotation = normalize(from_xyzw(rest.world_rotation))
            else:
                rotation = IDENTITY_ROTATION

            kind, idx = self.channel_map.position[b]
            if kind == ChannelKind.CONSTANT and idx < len(constants.positions):
                position = constants.positions[idx]
            elif rest is not None:
                position = tuple(rest.world_position)
            else:
                position = ZERO_POSITION

            kind, idx = self.channel_map.scale[b]
            if kind == ChannelKind.CONSTANT and idx < len(constants.scales):
                scale = constants.scales[idx]
            else:
                scale = UNIT_SCALE

            base.append(Keyframe(rotation=rotation, position=position, scale=scale))

        return base

    def apply_sample(self, pose: Pose, channel: int, value) -> None:
        """Overwrite one bone channel of a frame with a dequantized sample."""
        bone, group = self.channel_map.channel_to_bone[channel]
        keyframe = pose[bone]
        if group == ChannelGroup.ROTATION:
            keyframe.rotation = from_smallest_three(value[0], value[1], value[2])
        elif group == ChannelGroup.POSITION:
            keyframe.position = (
                value[0] * POSITION_SCALE,
                value[1] * POSITION_SCALE,
                value[2] * POSITION_SCALE,
            )
        else:
            keyframe.scale = tuple(value)

    def reconstruct(self, frame_count: int, segments: Sequence[DecodedSegment]) -> List[Pose]:
        """
        Build every frame.

        Args:
            frame_count: Number of frames in the animation
            segments: Decoded segments (segments without animated data omitted)

        Returns:
            keyframes[frame][bone]
        """
        keyframes = [[kf.copy() for kf in self.base_pose] for _ in range(frame_count)]

        for decoded in segments:
            start = decoded.segment.frame_start
            for offset, samples in enumerate(decoded.samples):
                frame = start + offset
                if frame >= frame_count:
                    break
                pose = keyframes[frame]
                for channel, value in enumerate(samples):
                    self.apply_sample(pose, channel, value)

        return keyframes

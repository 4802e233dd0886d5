"""
World-space evaluation of decoded poses against a skeleton.

V1 poses are already world-space; skeleton bones beyond the animated bone
count keep their rest offset from their (animated) parent. V0 poses are
local-space and are chained through the parent hierarchy.
"""

from dataclasses import dataclass
from typing import List, Sequence

from civ_anim.codec.animation import BoneRestPose, ParsedAnimation, Quat, Vec3
from civ_anim.codec.quat import conjugate, from_xyzw, multiply, rotate


@dataclass(frozen=True)
class WorldTransform:
    """World-space transform of one skeleton bone."""
    position: Vec3
    rotation: Quat  # w, x, y, z


def _add(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def _sub(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def _rest_transform(bone: BoneRestPose) -> WorldTransform:
    return WorldTransform(tuple(bone.world_position), from_xyzw(bone.world_rotation))


def _has_parent(parent: int, index: int) -> bool:
    # parents precede children in skeleton order
    return 0 <= parent < index


def evaluate_world_pose(anim: ParsedAnimation, frame: int,
                        rest_pose: Sequence[BoneRestPose]) -> List[WorldTransform]:
    """
    Compute world transforms for every skeleton bone at a frame.

    Args:
        anim: Decoded animation with keyframes
        frame: Frame index, clamped to the animation's range
        rest_pose: Skeleton rest pose, parents before children

    Returns:
        One WorldTransform per skeleton bone

    Raises:
        ValueError: If the animation has no decoded keyframes
    """
    pose = anim.get_pose(frame)
    if pose is None:
        raise ValueError("Animation has no decoded keyframes")

    world: List[WorldTransform] = []

    for i, bone in enumerate(rest_pose):
        parent = bone.parent_index
        in_pose = i < len(pose)

        if anim.is_world_space:
            if in_pose:
                kf = pose[i]
                world.append(WorldTransform(tuple(kf.position), tuple(kf.rotation)))
            elif _has_parent(parent, i):
                rest_parent = rest_pose[parent]
                inv_rest_parent_rot = conjugate(from_xyzw(rest_parent.world_rotation))
                offset = rotate(inv_rest_parent_rot,
                                _sub(bone.world_position, rest_parent.world_position))
                parent_world = world[parent]
                world.append(WorldTransform(
                    _add(parent_world.position, rotate(parent_world.rotation, offset)),
                    multiply(parent_world.rotation,
                             multiply(inv_rest_parent_rot, from_xyzw(bone.world_rotation))),
                ))
            else:
                world.append(_rest_transform(bone))
        else:
            if in_pose:
                kf = pose[i]
                if _has_parent(parent, i):
                    parent_world = world[parent]
                    world.append(WorldTransform(
                        _add(parent_world.position, rotate(parent_world.rotation, kf.position)),
                        multiply(parent_world.rotation, kf.rotation),
                    ))
                else:
                    world.append(WorldTransform(tuple(kf.position), tuple(kf.rotation)))
            else:
                world.append(_rest_transform(bone))

    return world

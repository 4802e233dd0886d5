"""
civ_anim Animation Codec

Decodes skeletal animation blobs (magic 0x6AB06AB0) extracted from game
asset containers into per-frame bone poses.

Supported:
- V0 uncompressed keyframes (local space)
- V1 "AC11" compressed keyframes (world space): segmented, per-channel
  classification, bit-packed animated channels
- World-space evaluation against a skeleton rest pose

Limitations:
- Decoding only; there is no encoder
- Blobs must already be decompressed
- The skeleton file itself is read elsewhere; pass a BoneRestPose list
"""

from civ_anim.codec.animation import (
    BoneRestPose,
    ChannelGroup,
    ChannelKind,
    FormatVersion,
    Keyframe,
    ParsedAnimation,
)
from civ_anim.codec.decoder import AnimationDecoder, decode_animation
from civ_anim.codec.errors import (
    BadMagicError,
    FormatError,
    InconsistentError,
    TruncatedError,
)
from civ_anim.codec.world_pose import WorldTransform, evaluate_world_pose

__all__ = [
    'AnimationDecoder',
    'decode_animation',
    'ParsedAnimation',
    'Keyframe',
    'BoneRestPose',
    'ChannelKind',
    'ChannelGroup',
    'FormatVersion',
    'FormatError',
    'BadMagicError',
    'TruncatedError',
    'InconsistentError',
    'WorldTransform',
    'evaluate_world_pose',
]

"""
Animation blob decoder.

Entry point for turning a decompressed animation blob into per-frame bone
poses. Header failures raise; keyframe failures are reported on the result
so callers can still show the animation's metadata.
"""

import logging
import os
from typing import List, Optional, Sequence

from civ_anim.codec.animated_headers import read_animated_headers
from civ_anim.codec.animation import (
    BoneRestPose,
    ChannelGroup,
    ParsedAnimation,
    Pose,
)
from civ_anim.codec.bit_reader import ByteReader
from civ_anim.codec.channels import classify_channels
from civ_anim.codec.constant_table import read_constant_tables
from civ_anim.codec.errors import FormatError, InconsistentError
from civ_anim.codec.header import AnimationHeader, parse_header, parse_v1_header
from civ_anim.codec.pose import PoseReconstructor
from civ_anim.codec.segment_body import SegmentBodyDecoder
from civ_anim.codec.segments import read_segment_table
from civ_anim.codec.v0 import decode_v0_keyframes
from civ_anim.config import DecoderConfig

logger = logging.getLogger(__name__)


class AnimationDecoder:
    """
    Decoder for 0x6AB06AB0 animation blobs.

    Usage:
        decoder = AnimationDecoder()
        anim = decoder.decode(blob, rest_pose)
        if anim.keyframes is not None:
            pose = anim.get_pose(0)

    A decoder holds only its configuration and logger, so one instance can
    be shared between threads.
    """

    def __init__(self, config: Optional[DecoderConfig] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config or DecoderConfig()
        self.logger = logger

    def log(self, level: str, message: str):
        """Log a message to the injected logger, or the module logger."""
        getattr(self.logger or logger, level)(message)

    def load(self, file_path: str,
             rest_pose: Optional[Sequence[BoneRestPose]] = None) -> ParsedAnimation:
        """
        Load and decode an animation blob stored in a file.

        Args:
            file_path: Path to a decompressed animation blob
            rest_pose: Skeleton rest pose for V1 fallback channels

        Returns:
            ParsedAnimation
        """
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"Animation file not found: {file_path}")

        with open(file_path, 'rb') as f:
            data = f.read()

        return self.decode(data, rest_pose)

    def decode(self, data, rest_pose: Optional[Sequence[BoneRestPose]] = None,
               strict: Optional[bool] = None) -> ParsedAnimation:
        """
        Decode an animation blob.

        Args:
            data: Decompressed animation bytes (never modified)
            rest_pose: Skeleton rest pose for V1 identity channels
            strict: Raise keyframe-stage errors instead of recording them
                (defaults to the config setting)

        Returns:
            ParsedAnimation; keyframes is None when keyframe decoding failed

        Raises:
            TruncatedError: Blob shorter than the header
            BadMagicError: Not an animation blob
        """
        if strict is None:
            strict = self.config.strict

        header = parse_header(data, self.config)
        anim = ParsedAnimation(
            fps=header.fps,
            frame_count=header.frame_count,
            bone_count=header.bone_count,
            duration=header.duration,
            name=header.name,
            is_v0=header.is_v0,
            is_world_space=not header.is_v0,
        )

        try:
            if header.is_v0:
                anim.keyframes = decode_v0_keyframes(
                    data, header.frame_count, header.bone_count, self.config)
            else:
                anim.keyframes = self._decode_v1(data, header, rest_pose)
        except FormatError as e:
            if strict:
                raise
            self.log('warning', f"Keyframes of animation '{header.name}' not decodable: {e}")
            anim.decode_error = e

        return anim

    def _decode_v1(self, data, header: AnimationHeader,
                   rest_pose: Optional[Sequence[BoneRestPose]]) -> List[Pose]:
        """Decode the AC11 compressed keyframes."""
        reader = ByteReader(data)
        v1 = parse_v1_header(data, self.logger or logger)
        frame_count = header.frame_count

        # the sub-header's bone count drives the channel layout
        bone_count = v1.bone_count
        if bone_count == 0 or bone_count > self.config.max_bone_count:
            raise InconsistentError(f"Implausible V1 bone count {bone_count}")
        if frame_count == 0:
            raise InconsistentError("V1 animation has no frames")
        if frame_count > self.config.max_frame_count:
            raise InconsistentError(f"Frame count {frame_count} exceeds {self.config.max_frame_count}")
        if v1.last_frame + 1 != frame_count:
            raise InconsistentError(
                f"Header frame count {frame_count} disagrees with V1 last frame {v1.last_frame}")
        if bone_count != header.bone_count:
            self.log('warning',
                     f"V1 bone count {bone_count} differs from header bone count {header.bone_count}")

        segments = read_segment_table(reader, v1, frame_count)

        bitfield_start = v1.section_start(1)
        bitfield_size = v1.section_offsets[2] - v1.section_offsets[1]
        classification = classify_channels(reader, bitfield_start, bitfield_size, bone_count, self.config)

        # header counts, not tallies: a per-bone scale table is larger than its tally
        constants, _ = read_constant_tables(reader, bitfield_start + bitfield_size, v1.constant_counts)
        tallies = classification.constant_counts
        for group in (ChannelGroup.ROTATION, ChannelGroup.POSITION):
            if v1.constant_counts[group] != tallies[group]:
                self.log('warning',
                         f"Constant {group.name.lower()} count {v1.constant_counts[group]} "
                         f"differs from bitfield tally {tallies[group]}")

        r_anim, t_anim, s_anim = classification.animated_counts
        total_anim = r_anim + t_anim + s_anim
        self.log('info',
                 f"  V1: bones={bone_count} segs={v1.segment_count} frames={frame_count} "
                 f"anim=[R{r_anim} T{t_anim} S{s_anim}]={total_anim}")

        if v1.total_animated != total_anim:
            raise InconsistentError(
                f"Header declares {v1.total_animated} animated channels, bitfield has {total_anim}")
        if v1.animated_counts != (r_anim, t_anim, s_anim):
            self.log('warning',
                     f"Header animated counts {v1.animated_counts} differ from bitfield "
                     f"{(r_anim, t_anim, s_anim)}")

        headers = read_animated_headers(reader, v1.section_start(3), v1.total_animated)

        reconstructor = PoseReconstructor(classification, constants, bone_count, rest_pose)

        decoded = []
        if total_anim > 0:
            if not segments:
                raise InconsistentError(f"{total_anim} animated channels but no segments")
            body_decoder = SegmentBodyDecoder(reader, v1, segments, headers, self.logger or logger)
            for index in range(len(segments)):
                segment = body_decoder.decode(index)
                if segment is not None:
                    decoded.append(segment)

        return reconstructor.reconstruct(frame_count, decoded)


def decode_animation(data, rest_pose: Optional[Sequence[BoneRestPose]] = None,
                     config: Optional[DecoderConfig] = None,
                     logger: Optional[logging.Logger] = None,
                     strict: Optional[bool] = None) -> ParsedAnimation:
    """
    Decode an animation blob with a one-off decoder.

    See AnimationDecoder.decode.
    """
    return AnimationDecoder(config, logger).decode(data, rest_pose, strict)

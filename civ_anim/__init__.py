"""
civ_anim Package

Skeletal animation codec for game asset animation blobs.
"""

__version__ = '0.5.0'
__author__ = 'civ_anim Team'

from civ_anim.codec import AnimationDecoder, decode_animation

__all__ = [
    'AnimationDecoder',
    'decode_animation',
    '__version__',
]

"""SoundComm relay: live instrument level coordination between requesters and operators."""

__version__ = "1.0.0"

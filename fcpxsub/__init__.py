"""FCPXSub: speech-to-text subtitles delivered as Final Cut Pro FCPXML projects."""

__version__ = "0.1.0"

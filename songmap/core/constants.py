"""Global constants for songmap."""

# Chromatic tables
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
A_BASED_PITCH_NAMES = ["A", "A#", "B", "C", "C#", "D", "D#", "E", "F", "F#", "G", "G#"]

# Tuning reference
A4_FREQUENCY = 440.0
A4_OCTAVE = 4

# Audio processing defaults
DEFAULT_SR = 44100
DEFAULT_FFT_SIZE = 4096
DEFAULT_WINDOW_DURATION = 1.0  # seconds per analysis window

# Musical band for peak picking (Hz, exclusive)
MUSICAL_FMIN = 20.0
MUSICAL_FMAX = 4000.0
DEFAULT_DOMINANT_COUNT = 10

# Chord inference
CHORD_ROOT_CANDIDATES = 3
CHORD_CONFIDENCE_NORMALIZER = 3.0
MIN_CHORD_DURATION = 0.5  # seconds; shorter chords are treated as noise
MAX_ALTERNATIVE_CHORDS = 3
MEDIUM_CONFIDENCE_THRESHOLD = 0.5
HIGH_CONFIDENCE_THRESHOLD = 0.75

# Onset detection
DEFAULT_ONSET_THRESHOLD = 0.3

# Section detection
MIN_PATTERN_LENGTH = 4  # chords
MAX_PATTERN_LENGTH = 12  # chords
MIN_PATTERN_OCCURRENCES = 2
INTRO_CUTOFF = 10.0  # seconds

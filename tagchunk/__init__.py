"""Part-of-speech tagging and phrase chunking with averaged perceptrons."""
from .chunker import Chunker, decode
from .config import Config, load_config
from .errors import CyclicTaggerChain, EmptyCorpus, MalformedModel, TagChunkError, UnknownLabel
from .evaluation import EvaluationReport, evaluate_chunker, evaluate_tagger
from .io_utils import load_chunker, load_tagger, parse_tagged, save_model
from .perceptron import Perceptron
from .pipeline import Pipeline, load_pipeline
from .serialization import deserialize, serialize
from .tagger import LiteralTagger, PerceptronTagger, Tagger, UnambiguousTagger, chain, tag_text
from .types import Chink, Chunk, ChunkedSentence, TaggedSentence, TaggedToken
from .vocabulary import BROWN, CONLL_CHUNK, CONLL_POS, TagVocabulary, get_vocabulary

__version__ = "0.1.0"

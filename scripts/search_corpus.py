#!/usr/bin/env python3
"""
Corpus Search Utility
Embeds every line of a text file and ranks the lines against a query sentence.
"""

import argparse
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from nl_embeddings.core.config import validate_config
from nl_embeddings.core.errors import EmbeddingError
from nl_embeddings.vector import EmbeddingService, ModelSpec
from nl_embeddings.vector.evaluation import precision_at_k, reciprocal_rank


def load_corpus(path):
    """Read non-blank lines from a corpus file."""
    with open(path, encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip()]


def main(argv=None):
    parser = argparse.ArgumentParser(description="Rank corpus lines by similarity to a query")
    parser.add_argument("corpus", help="Text file with one document per line")
    parser.add_argument("query", help="Query sentence")
    parser.add_argument("--min-similarity", type=float, default=None,
                        help="Only show results with similarity >= this value")
    parser.add_argument("--top", type=int, default=5, help="Number of results to print")
    parser.add_argument("--language", default=None, help="Language hint, e.g. en")
    parser.add_argument("--model", default=None, help="sentence-transformers model name")
    parser.add_argument("--threshold", type=int, default=None,
                        help="Optimization threshold for batched search")
    parser.add_argument("--relevant", default=None,
                        help="Comma-separated indices of relevant lines, prints Precision@K and reciprocal rank")
    args = parser.parse_args(argv)

    issues = validate_config()
    if issues:
        for issue in issues:
            print(f"ERROR: {issue}")
        return 1

    corpus = load_corpus(args.corpus)
    if not corpus:
        print("ERROR: Corpus is empty")
        return 1

    spec = ModelSpec.for_model(args.model) if args.model else None

    try:
        service = EmbeddingService(spec=spec, optimization_threshold=args.threshold)
        embeddings = [service.generate_embeddings(doc, language=args.language) for doc in corpus]
        results = service.search(args.query, embeddings, args.min_similarity, language=args.language)
    except EmbeddingError as e:
        print(f"ERROR: {type(e).__name__}: {e}")
        return 1

    print(service.format_model_info())
    print(f"\nQuery: '{args.query}' ({len(results)} of {len(corpus)} documents)")
    for rank, (index, score) in enumerate(results[:args.top], start=1):
        print(f"  {rank}. [{index}] {score:.4f} - {corpus[index][:60]}")

    if args.relevant:
        relevant = {int(i) for i in args.relevant.split(",") if i.strip()}
        p = precision_at_k(results, relevant, args.top)
        print(f"\nPrecision@{p.k}: {p.precision:.2f} ({p.relevant}/{p.k} relevant)")
        print(f"Reciprocal rank: {reciprocal_rank(results, relevant):.2f}")

    return 0


if __name__ == "__main__":
    sys.exit(main())

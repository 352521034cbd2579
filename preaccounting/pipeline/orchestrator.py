"""
Document Analysis Orchestrator Module.

Composes the pre-accounting components into one analysis per document:

    Raw text → Field Extraction → Direction Classification
             → Currency Detection → Rates (once) → MAD Conversion
             → Currency Analysis → Validation → DocumentAnalysis

Batches run strictly one document after another, in input order.

Usage:
    from preaccounting.pipeline import DocumentAnalysisOrchestrator

    orchestrator = DocumentAnalysisOrchestrator()
    analysis = await orchestrator.process_document_text(text, "pdf")
    batch = await orchestrator.process_batch(paths, on_progress=print)
"""

import asyncio
import inspect
import time
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from preaccounting.classification.classifier import DirectionClassifier
from preaccounting.currency.catalog import BASE_CURRENCY
from preaccounting.currency.converter import CurrencyConverter
from preaccounting.currency.detector import CurrencyDetector, analyze_currencies
from preaccounting.currency.rates import ExchangeRateCache, ExchangeRateSnapshot, default_snapshot
from preaccounting.extraction.extractor import FinancialExtractor
from preaccounting.extraction.financial_data import TARGET_FIELD_COUNT
from preaccounting.extraction.validators import FinancialDataValidator
from preaccounting.input_handler.handler import PlainTextExtractor, RawDocumentText, TextExtractor
from preaccounting.utils.exceptions import ExchangeRateError
from preaccounting.utils.logger import get_logger
from .document_analysis import BatchError, BatchResult, DocumentAnalysis

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int, int], Any]


class DocumentAnalysisOrchestrator:
    """
    Runs the full analysis of documents.

    Every collaborator can be injected; defaults are built from the
    configuration. One rate cache is shared by all documents the
    orchestrator processes.

    Attributes:
        financial_extractor: FinancialExtractor instance
        classifier: DirectionClassifier instance
        currency_detector: CurrencyDetector instance
        rate_cache: ExchangeRateCache instance
        converter: CurrencyConverter instance
        text_extractor: TextExtractor for items that are not raw text
        validator: FinancialDataValidator instance

    Example:
        >>> orchestrator = DocumentAnalysisOrchestrator()
        >>> analysis = await orchestrator.process_document_text(
        ...     "Facture fournisseur Total: 1 200,00 MAD TVA 20%: 200,00 MAD"
        ... )
        >>> analysis.financial_data.amount
        1200.0
    """

    def __init__(
        self,
        financial_extractor: Optional[FinancialExtractor] = None,
        classifier: Optional[DirectionClassifier] = None,
        currency_detector: Optional[CurrencyDetector] = None,
        rate_cache: Optional[ExchangeRateCache] = None,
        converter: Optional[CurrencyConverter] = None,
        text_extractor: Optional[TextExtractor] = None,
        validator: Optional[FinancialDataValidator] = None
    ) -> None:
        logger.info("Initializing pipeline components...")

        self.financial_extractor = financial_extractor or FinancialExtractor()
        self.classifier = classifier or DirectionClassifier()
        self.currency_detector = currency_detector or CurrencyDetector()
        if rate_cache is None:
            rate_cache = converter.cache if converter is not None else ExchangeRateCache()
        self.rate_cache = rate_cache
        self.converter = converter or CurrencyConverter(self.rate_cache)
        self.text_extractor = text_extractor or PlainTextExtractor()
        self.validator = validator or FinancialDataValidator()

    async def process_document_text(
        self,
        raw_text: Optional[str],
        document_type: str = "unknown",
        options: Optional[Dict[str, Any]] = None,
        file_path: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> DocumentAnalysis:
        """
        Analyze the text of one document.

        Args:
            raw_text: Text recovered by an extractor.
            document_type: Origin format of the document.
            options: ``rate_date`` (ISO date) selects historical rates.
            file_path: Source path, recorded on the analysis.
            metadata: Extractor metadata, recorded on the analysis.

        Returns:
            DocumentAnalysis; on an unexpected failure the analysis has
            ``error`` set and confidence 0.
        """
        options = options or {}
        metadata = dict(metadata or {})
        start_time = time.perf_counter()

        try:
            financial_data = self.financial_extractor.extract(raw_text, document_type)
            classification = self.classifier.classify(financial_data, raw_text)

            mentions = self.currency_detector.detect(raw_text)
            rate_date = options.get('rate_date')

            if mentions:
                snapshot, used_fallback = await self._fetch_rates(rate_date)
                metadata['exchange_rates'] = {
                    'source': snapshot.source,
                    'date': snapshot.date,
                    'is_historical': snapshot.is_historical,
                }

                for mention in mentions:
                    conversion = await self.converter.convert(
                        mention.original_amount,
                        mention.code,
                        BASE_CURRENCY,
                        rates=snapshot.rates,
                        date=rate_date
                    )
                    mention.mad_equivalent = conversion.converted_amount
                    mention.conversion_rate = conversion.rate
                    mention.conversion_date = conversion.date
                    mention.formatted_original = conversion.formatted_original
                    mention.formatted_mad = conversion.formatted_converted
                    mention.used_fallback = used_fallback or conversion.used_fallback

            validation = self.validator.validate(financial_data)
            populated = financial_data.populated_fields(classification.type)

            analysis = DocumentAnalysis(
                file_path=file_path,
                document_type=document_type,
                classification=classification,
                financial_data=financial_data,
                currencies=mentions,
                currency_analysis=analyze_currencies(mentions),
                has_foreign_currency=any(m.code != BASE_CURRENCY for m in mentions),
                total_mad=sum(m.mad_equivalent or 0.0 for m in mentions),
                confidence=populated / TARGET_FIELD_COUNT,
                metadata=metadata,
                warnings=validation.warnings + validation.errors,
                processing_time=time.perf_counter() - start_time
            )

            logger.info(
                f"Document analyzed: {analysis.classification.type.value}, "
                f"amount={financial_data.amount}, "
                f"primary currency={analysis.currency_analysis.primary_currency}, "
                f"confidence={analysis.confidence:.2f}"
            )
            return analysis

        except Exception as e:
            logger.error(f"Error analyzing document {file_path or ''}: {e}")
            return DocumentAnalysis(
                file_path=file_path,
                document_type=document_type,
                confidence=0.0,
                metadata=metadata,
                error=str(e),
                processing_time=time.perf_counter() - start_time
            )

    async def _fetch_rates(self, rate_date: Optional[str]) -> Tuple[ExchangeRateSnapshot, bool]:
        """Get the MAD rate snapshot once per document, falling back to defaults."""
        try:
            snapshot = await self.rate_cache.get_snapshot(BASE_CURRENCY, rate_date)
            return snapshot, False
        except ExchangeRateError as e:
            logger.warning(f"Using default exchange rates: {e}")
            return default_snapshot(BASE_CURRENCY, rate_date), True

    async def process_document(self, item: Any, options: Optional[Dict[str, Any]] = None) -> DocumentAnalysis:
        """
        Analyze one batch item.

        Args:
            item: RawDocumentText, or a source handed to the text extractor.
            options: Analysis options.

        Returns:
            DocumentAnalysis.

        Raises:
            InputError: If the text extractor cannot read the item.
        """
        if isinstance(item, RawDocumentText):
            document = item
        else:
            document = await self.text_extractor.extract_text(item)

        return await self.process_document_text(
            document.text,
            document.document_type.value,
            options=options,
            file_path=document.file_path,
            metadata=document.metadata
        )

    async def process_batch(
        self,
        items: Iterable[Any],
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[asyncio.Event] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> BatchResult:
        """
        Analyze documents one after another.

        A failing item is recorded in ``errors`` and the batch goes on.
        ``on_progress(completed, total, failed)`` is called after every
        item; it may be a coroutine function. Setting ``cancel_event``
        stops the batch before the next item.

        Args:
            items: Batch items, see ``process_document``.
            on_progress: Progress callback.
            cancel_event: Cancellation token checked between documents.
            options: Analysis options applied to every document.

        Returns:
            BatchResult with results and errors in input order.
        """
        items = list(items)
        total = len(items)
        batch = BatchResult()
        completed = 0

        logger.info(f"Processing {total} documents...")

        for item in items:
            if cancel_event is not None and cancel_event.is_set():
                logger.warning(f"Batch cancelled after {completed}/{total} documents")
                batch.cancelled = True
                break

            try:
                analysis = await self.process_document(item, options)
                if analysis.error is not None:
                    batch.errors.append(BatchError(item=item, error=analysis.error))
                else:
                    batch.results.append(analysis)
            except Exception as e:
                logger.error(f"Error processing {item}: {e}")
                batch.errors.append(BatchError(item=item, error=str(e)))

            completed += 1
            if on_progress is not None:
                outcome = on_progress(completed, total, len(batch.errors))
                if inspect.isawaitable(outcome):
                    await outcome

        logger.info(
            f"Batch complete: {len(batch.results)} analyzed, {len(batch.errors)} failed"
        )
        return batch

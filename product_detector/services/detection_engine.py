# product_detector/services/detection_engine.py

"""Single detection pass: classify, then run the strategy chain."""

import logging

from product_detector.classifier.page_classifier import PageClassifier
from product_detector.document.accessor import DocumentAccessor
from product_detector.models.product import ProductRecord
from product_detector.strategies.strategy_chain import StrategyChain

logger = logging.getLogger("product_detector.engine")


class DetectionEngine:
    """Stateless pipeline; one instance per page lifecycle.

    ``run`` never raises.  Any unexpected fault in classification or
    extraction becomes a fault record carrying the error message.
    """

    def __init__(
        self,
        classifier: PageClassifier | None = None,
        chain: StrategyChain | None = None,
    ) -> None:
        self.classifier = classifier or PageClassifier()
        self.chain = chain or StrategyChain()

    def run(self, url: str, doc: DocumentAccessor) -> ProductRecord:
        """Build a fresh record for *url*."""
        is_product_page = False
        try:
            is_product_page = self.classifier.is_product_page(url, doc)
            if not is_product_page:
                logger.debug("Not a product page: %s", url)
                return ProductRecord(url=url, is_product_page=False)
            return self.chain.run(url, doc)
        except Exception as exc:
            logger.error(
                "Detection failed on %s: %s", url, exc, exc_info=True,
            )
            return ProductRecord.fault(
                url, str(exc) or type(exc).__name__, is_product_page,
            )

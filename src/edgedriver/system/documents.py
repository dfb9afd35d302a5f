"""
lxml Document Query - Implementation of IDocumentQuery using XPath.
"""

from typing import Dict, List, Mapping, Union

from lxml import etree

from edgedriver.interfaces.document import IDocumentQuery


class LxmlDocumentQuery(IDocumentQuery):
    """
    XPath-based document query over XML.
    
    ``root`` and every field selector are XPath expressions. Field selectors
    are evaluated relative to each root node and converted to their string
    value, so ``Properties/Last-Modified`` and ``string(Url)`` both work.
    
    Example:
        >>> query = LxmlDocumentQuery()
        >>> query.query(xml, "/EnumerationResults/Blobs/Blob", {"name": "Name"})
        [{'name': '114.0.1823.43/edgedriver_win64.zip'}, ...]
    """
    
    def __init__(self):
        # Catalog documents are untrusted remote input
        self._parser = etree.XMLParser(
            resolve_entities=False,
            no_network=True,
            remove_blank_text=True,
        )
    
    def query(
        self,
        document: Union[str, bytes],
        root: str,
        fields: Mapping[str, str],
    ) -> List[Dict[str, str]]:
        if isinstance(document, str):
            document = document.encode("utf-8")
        
        try:
            tree = etree.fromstring(document, parser=self._parser)
        except etree.XMLSyntaxError as e:
            raise ValueError(f"Malformed XML document: {e}") from e
        
        selectors = {
            name: etree.XPath(f"string({selector})")
            if not selector.startswith("string(") else etree.XPath(selector)
            for name, selector in fields.items()
        }
        
        records = []
        for node in tree.xpath(root):
            records.append({
                name: str(selector(node)).strip()
                for name, selector in selectors.items()
            })
        return records

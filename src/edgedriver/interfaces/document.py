"""
Document Interface - Query structured documents into flat records.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Mapping, Union


class IDocumentQuery(ABC):
    """
    Abstract interface for turning a structured document into records.
    
    Implementations select every node matched by ``root`` and evaluate each
    field selector relative to that node, producing one flat record per node.
    Selectors that match nothing yield an empty string.
    """

    @abstractmethod
    def query(
        self,
        document: Union[str, bytes],
        root: str,
        fields: Mapping[str, str],
    ) -> List[Dict[str, str]]:
        """
        Extract records from a document.
        
        Args:
            document: Raw document content
            root: Selector for the nodes that become records
            fields: Record field name -> selector relative to a root node
            
        Returns:
            One dict per matched node, keyed by the field names
            
        Raises:
            ValueError: If the document cannot be parsed
        """
        ...

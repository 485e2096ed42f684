"""Menu catalogue: loading, filtering, search and admin updates"""
import json
import logging
from typing import List, Dict, Any, Optional

from fuzzywuzzy import fuzz

from bhojan.core.config import FUZZY_MATCH_THRESHOLD
from bhojan.core.enums import DietaryPreference, ErrorKind
from bhojan.core.errors import Result
from bhojan.core.validation import MenuItem, MENU_ITEMS_ADAPTER, validate_menu_items

logger = logging.getLogger(__name__)

class MenuCatalogue:
    def __init__(self, path: str):
        self.path = path

    def get_menu_items(self) -> Result:
        """Read every menu item from the menu file"""
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                menu_data = json.load(f)
        except FileNotFoundError:
            logger.error(f"Menu file not found: {self.path}")
            return Result.fail('Menu file not found', ErrorKind.DEPENDENCY)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in menu file: {e}")
            return Result.fail('Invalid JSON format in menu file', ErrorKind.DEPENDENCY)
        except OSError as e:
            logger.error(f"Error reading menu items: {e}", exc_info=True)
            return Result.fail('Failed to load menu items. Please try again.', ErrorKind.DEPENDENCY)

        if not isinstance(menu_data, dict) or not isinstance(menu_data.get('menuItems'), list):
            return Result.fail('Invalid menu data structure', ErrorKind.DEPENDENCY)

        validation = validate_menu_items(menu_data['menuItems'])
        if not validation.success:
            logger.error(f"Menu file failed validation: {validation.error}")
            return Result.fail('Invalid menu data structure', ErrorKind.DEPENDENCY)
        return validation

    def get_item(self, item_id: str) -> Optional[MenuItem]:
        result = self.get_menu_items()
        if not result.success:
            return None
        for item in result.data:
            if item.id == item_id:
                return item
        return None

    def update_menu_items(self, items: Any) -> Result:
        """Validate and write back the whole menu; callers check admin auth"""
        validation = validate_menu_items(items)
        if not validation.success:
            return validation

        menu_items = validation.data
        ids = [item.id for item in menu_items]
        if len(ids) != len(set(ids)):
            return Result.fail('Duplicate menu item IDs found', ErrorKind.VALIDATION)

        menu_data = {'menuItems': MENU_ITEMS_ADAPTER.dump_python(menu_items, by_alias=True, mode='json')}
        try:
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(menu_data, f, indent=2, ensure_ascii=False)
        except PermissionError:
            logger.error(f"Permission denied writing {self.path}")
            return Result.fail('Permission denied to write menu file', ErrorKind.DEPENDENCY)
        except OSError as e:
            logger.error(f"Error updating menu items: {e}", exc_info=True)
            return Result.fail('Failed to update menu items. Please try again.', ErrorKind.DEPENDENCY)

        logger.info(f"Menu updated with {len(menu_items)} items")
        return Result.ok()

def _matches_query(item: MenuItem, query: str) -> bool:
    query = query.lower()
    if query in item.name.lower() or query in item.description.lower():
        return True
    if query in item.name_hi or query in item.description_hi:
        return True
    return fuzz.partial_ratio(query, item.name.lower()) >= FUZZY_MATCH_THRESHOLD

def filter_items(items: List[MenuItem], category: str = 'all', dietary: str = 'all',
                 query: str = '') -> List[MenuItem]:
    """Apply the category, dietary and search filters of the menu page"""
    try:
        preference = DietaryPreference(dietary or 'all')
    except ValueError:
        preference = DietaryPreference.ALL
    query = (query or '').strip()

    filtered = []
    for item in items:
        if category and category != 'all' and item.category != category:
            continue
        if preference == DietaryPreference.VEG and not item.is_veg:
            continue
        if preference == DietaryPreference.NON_VEG and item.is_veg:
            continue
        if query and not _matches_query(item, query):
            continue
        filtered.append(item)

    logger.info(f"Menu filter category={category} dietary={preference.value} query={query!r}: {len(filtered)} items")
    return filtered

def localized(item: MenuItem, locale: str = 'en') -> Dict[str, Any]:
    """Menu item as API output, with name and description in the given locale"""
    data = item.model_dump(by_alias=True, mode='json')
    if locale == 'hi':
        data['name'] = item.name_hi
        data['description'] = item.description_hi
    return data

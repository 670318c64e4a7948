"""
In-page inspection scripts for the UX checks.

Each script is passed to ``WebDriver.execute_script`` and returns a plain
JSON-serialisable object. Non-finite numbers are returned as ``null``.
"""

NETWORK_IDLE_SCRIPT = """
const idleMs = arguments[0];
if (document.readyState !== 'complete') return false;
const now = performance.now();
const entries = performance.getEntriesByType('resource') || [];
return entries.every(e => e.responseEnd > 0 && (now - e.responseEnd) > idleMs);
"""

VISUAL_HIERARCHY_SCRIPT = """
const isShown = el => {
  const style = window.getComputedStyle(el);
  return style.display !== 'none' && style.visibility !== 'hidden';
};
const visible = tag => Array.from(document.querySelectorAll(tag)).filter(isShown);
const h1 = visible('h1');
const h2 = visible('h2');
const sizes = list => list.map(h => parseFloat(window.getComputedStyle(h).fontSize))
  .filter(Number.isFinite);

const ctaWords = ['купить', 'заказать', 'начать', 'подробнее',
                  'buy', 'order', 'start', 'learn more'];
const ctaSelectors = ['button', 'a[class*="cta"]', 'a[class*="button"]',
                      '[class*="call-to-action"]'];
let ctaCount = 0;
ctaSelectors.forEach(selector => {
  document.querySelectorAll(selector).forEach(el => {
    const text = (el.textContent || '').toLowerCase();
    if (ctaWords.some(word => text.includes(word)) &&
        el.offsetWidth > 0 && el.offsetHeight > 0) {
      ctaCount += 1;
    }
  });
});

return {
  h1Count: h1.length,
  h2Count: h2.length,
  headingSizes: {h1: sizes(h1), h2: sizes(h2)},
  ctaCount: ctaCount
};
"""

NAVIGATION_SCRIPT = """
const isVisible = el => el.offsetWidth > 0 && el.offsetHeight > 0;
const navSelectors = ['nav', '[role="navigation"]', 'header nav',
                      '.navigation', '.menu', '.nav'];
let mainNav = null;
for (const selector of navSelectors) {
  mainNav = Array.from(document.querySelectorAll(selector)).find(isVisible) || null;
  if (mainNav) break;
}

const header = document.querySelector('header');
const isSticky = !!header && window.getComputedStyle(header).position === 'fixed';

const links = mainNav ? Array.from(mainNav.querySelectorAll('a')) : [];
const visibleLinks = links.filter(link => {
  const style = window.getComputedStyle(link);
  return style.display !== 'none' && style.visibility !== 'hidden' && isVisible(link);
});

const hasBreadcrumbs = ['[aria-label*="breadcrumb"]', '.breadcrumb', '[class*="breadcrumb"]']
  .some(selector => !!document.querySelector(selector));
const hasSearch = ['input[type="search"]', '[role="search"]', '.search', '[class*="search"]']
  .some(selector => {
    const el = document.querySelector(selector);
    return !!el && isVisible(el);
  });

return {
  hasMainNav: !!mainNav,
  isSticky: isSticky,
  navLinksCount: visibleLinks.length,
  hasBreadcrumbs: hasBreadcrumbs,
  hasSearch: hasSearch
};
"""

TYPOGRAPHY_SCRIPT = """
const finite = value => Number.isFinite(value) ? value : null;
const bodyStyle = window.getComputedStyle(document.body);
const bodyFontSize = parseFloat(bodyStyle.fontSize);
const bodyLineHeight = parseFloat(bodyStyle.lineHeight);

const paragraphSizes = Array.from(document.querySelectorAll('p')).slice(0, 10)
  .map(p => parseFloat(window.getComputedStyle(p).fontSize))
  .filter(Number.isFinite);
const avgParagraphSize = paragraphSizes.length > 0
  ? paragraphSizes.reduce((a, b) => a + b, 0) / paragraphSizes.length
  : bodyFontSize;

const smallTextCount = Array.from(document.querySelectorAll('*')).filter(el => {
  const fontSize = parseFloat(window.getComputedStyle(el).fontSize);
  return fontSize < 14 && el.offsetWidth > 0 && el.offsetHeight > 0;
}).length;

return {
  bodyFontSize: finite(bodyFontSize),
  lineHeightRatio: finite(bodyLineHeight / bodyFontSize),
  avgParagraphSize: finite(avgParagraphSize),
  smallTextCount: smallTextCount
};
"""

INTERACTIVITY_SCRIPT = """
const buttons = Array.from(document.querySelectorAll(
  'button, a[class*="button"], input[type="submit"], input[type="button"]'));
const smallButtons = buttons.map(btn => ({
  width: btn.offsetWidth,
  height: btn.offsetHeight,
  minSize: Math.min(btn.offsetWidth, btn.offsetHeight),
  text: (btn.textContent || '').trim().substring(0, 30)
})).filter(b => b.minSize < 44);

const hasRule = pseudo => {
  for (const sheet of Array.from(document.styleSheets)) {
    let rules;
    try {
      rules = sheet.cssRules || [];
    } catch (e) {
      continue;  // cross-origin stylesheet
    }
    for (const rule of Array.from(rules)) {
      if (rule.selectorText && rule.selectorText.includes(pseudo)) return true;
    }
  }
  return false;
};

return {
  totalButtons: buttons.length,
  smallButtonsCount: smallButtons.length,
  smallButtons: smallButtons.slice(0, 5),
  hasHoverStyles: hasRule(':hover'),
  hasFocusStyles: hasRule(':focus')
};
"""

MOBILE_ADAPTATION_SCRIPT = """
const hamburgerSelectors = ['[class*="hamburger"]', '[class*="menu-toggle"]',
                            '[aria-label*="menu"]', '.mobile-menu'];
return {
  hasViewport: !!document.querySelector('meta[name="viewport"]'),
  hasMediaQueries: document.styleSheets.length > 0,
  hasHorizontalScroll: document.body.scrollWidth > window.innerWidth,
  bodyWidth: document.body.scrollWidth,
  windowWidth: window.innerWidth,
  hasHamburger: hamburgerSelectors.some(selector => !!document.querySelector(selector))
};
"""

HORIZONTAL_SCROLL_SCRIPT = """
return {
  hasHorizontalScroll: document.body.scrollWidth > window.innerWidth,
  bodyWidth: document.body.scrollWidth,
  windowWidth: window.innerWidth
};
"""

ACCESSIBILITY_SCRIPT = """
const images = Array.from(document.querySelectorAll('img'));
const imagesWithoutAlt = images.filter(img => {
  const alt = img.getAttribute('alt');
  return alt === null || alt.trim() === '';
});

const interactive = Array.from(document.querySelectorAll('button, a, input, select, textarea'));
const withoutAria = interactive.filter(el =>
  !el.getAttribute('aria-label') &&
  !el.getAttribute('aria-labelledby') &&
  (!el.textContent || el.textContent.trim() === ''));

const inputs = Array.from(document.querySelectorAll('input, select, textarea'));
const inputsWithoutLabels = inputs.filter(input => {
  if (!input.id) return true;
  return !document.querySelector(`label[for="${CSS.escape(input.id)}"]`);
});

return {
  totalImages: images.length,
  imagesWithoutAlt: imagesWithoutAlt.length,
  totalInteractive: interactive.length,
  elementsWithoutAria: withoutAria.length,
  hasMain: !!document.querySelector('main, [role="main"]'),
  hasHeader: !!document.querySelector('header, [role="banner"]'),
  hasFooter: !!document.querySelector('footer, [role="contentinfo"]'),
  totalInputs: inputs.length,
  inputsWithoutLabels: inputsWithoutLabels.length
};
"""

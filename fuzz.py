#!/usr/bin/env python3
"""
Random fuzzer for the markupguard sanitizer.
Generates hostile, malformed markup and checks that every output is safe and
stable under a second sanitize call.
"""

import argparse
import random
import string
import sys
import time
import traceback

from markupguard import DEFAULT_POLICY, Element, sanitize, sanitize_fragment
from markupguard.attrs import is_event_handler
from markupguard.css import parse_declarations
from markupguard.urls import url_scheme

TAGS = [
    "div", "span", "p", "a", "img", "table", "tr", "td", "th", "ul", "ol", "li",
    "form", "input", "button", "select", "option", "textarea", "script", "style",
    "title", "br", "hr", "h1", "h2", "iframe", "object", "embed", "video", "svg",
    "math", "template", "noscript", "pre", "code", "blockquote", "frameset", "frame",
    "noframes", "noembed", "plaintext", "xmp", "listing", "image", "marquee", "applet",
    "mi", "mtext", "foreignObject", "desc", "annotation-xml", "x-widget",
]

ATTRIBUTES = [
    "id", "class", "style", "href", "src", "alt", "title", "target", "rel", "cite",
    "action", "formaction", "poster", "background", "xlink:href", "colspan",
    "onclick", "onload", "onerror", "ONMOUSEOVER", "data-mention", "srcdoc",
]

URLS = [
    "https://example.com/", "/relative", "#frag", "//proto.example/", "mailto:a@b.c",
    "javascript:alert(1)", " javascript:alert(1)", "JaVaScRiPt:alert(1)",
    "java\tscript:alert(1)", "java&#x09;script:alert(1)", "java&#115;cript:x",
    "\x01javascript:x", "vbscript:msgbox(1)", "data:text/html,<script>x</script>",
    "data:image/png;base64,AAAA", "jav&#x0A;ascript:x", "&#106;avascript:x",
]

STYLES = [
    "color: red", "font-size: 14px", "position: fixed", "width: expression(alert(1))",
    "background-image: url(javascript:alert(1))", "background-image: url('/a.png')",
    "background-image: url(data:image/png;base64,AAAA)", "color: red !important",
    "behavior: url(x.htc)", "-moz-binding: url(x.xml)", "color: \\72 ed",
    "color: re/**/d", "margin: 1px 2px", "font-family: 'x'; color: blue",
    "background-image: url(", "width: 10px; height: 20px",
]

TEXT = ["text", "&amp;", "&lt;script&gt;", "<", ">", "&", " ", "\x00", "alert(1)"]


def random_string(min_len=0, max_len=10):
    length = random.randint(min_len, max_len)
    return "".join(random.choices(string.ascii_letters + string.digits, k=length))


def fuzz_attribute():
    name = random.choice(ATTRIBUTES)
    if name == "style":
        value = "; ".join(random.sample(STYLES, random.randint(1, 3)))
    elif name in ("href", "src", "cite", "action", "formaction", "poster", "background", "xlink:href"):
        value = random.choice(URLS)
    else:
        value = random.choice([random_string(), "alert(1)", "_blank", "language-py evil"])
    quote = random.choice(['"', "'", ""])
    if not quote and any(c in value for c in " \t'\"<>="):
        quote = '"'
    return f"{name}={quote}{value}{quote}"


def fuzz_open_tag():
    tag = random.choice(TAGS)
    if random.random() < 0.2:
        tag = tag.upper()
    attrs = " ".join(fuzz_attribute() for _ in range(random.randint(0, 4)))
    closing = random.choice([">", "/>", " >"])
    return f"<{tag} {attrs}{closing}" if attrs else f"<{tag}{closing}"


def fuzz_close_tag():
    return random.choice([f"</{random.choice(TAGS)}>", f"</ {random.choice(TAGS)}>", "</>"])


def fuzz_comment():
    return random.choice(["<!-- x -->", "<!--", "<!-- <script>x</script> -->", "<!--->", "--!>"])


def fuzz_text():
    return "".join(random.choices(TEXT, k=random.randint(1, 4)))


def fuzz_nested(depth=0, max_depth=8):
    if depth >= max_depth or random.random() < 0.3:
        return fuzz_text()
    tag = random.choice(TAGS)
    inner = "".join(fuzz_nested(depth + 1, max_depth) for _ in range(random.randint(1, 3)))
    return f"<{tag} {fuzz_attribute()}>{inner}</{tag}>"


def generate_fuzzed_html():
    generators = [fuzz_open_tag, fuzz_close_tag, fuzz_comment, fuzz_text, fuzz_nested]
    weights = [5, 3, 1, 3, 2]
    parts = [random.choices(generators, weights=weights)[0]() for _ in range(random.randint(1, 15))]
    return "".join(parts)


def find_violations(html, policy=DEFAULT_POLICY):
    """Return a list of safety or stability violations for one input."""
    problems = []
    output = sanitize(html, policy=policy)
    if sanitize(output, policy=policy) != output:
        problems.append("output changed when sanitized again")

    stack = list(sanitize_fragment(html, policy=policy))
    while stack:
        node = stack.pop()
        if not isinstance(node, Element):
            continue
        if node.name in policy.remove_tags:
            problems.append(f"removed tag <{node.name}> survived")
        for name, value in node.attrs.items():
            if is_event_handler(name):
                problems.append(f"event handler {name!r} survived")
            if name in policy.uri_attributes:
                scheme = url_scheme(value or "")
                rule = policy.url_rule(node.name, name)
                allowed = rule.allowed_schemes if rule else policy.allowed_schemes
                if scheme is not None and scheme not in allowed:
                    problems.append(f"{name}={value!r} survived")
            if name == "style":
                for prop, _ in parse_declarations(value or ""):
                    if prop not in policy.css_properties:
                        problems.append(f"CSS property {prop!r} survived")
        stack.extend(node.children)
    return problems


def run_fuzzer(num_tests, seed=None, verbose=False, save_failures=False):
    if seed is not None:
        random.seed(seed)

    failures = []
    print(f"Fuzzing sanitizer with {num_tests} test cases...")
    start_time = time.time()

    for i in range(num_tests):
        html = generate_fuzzed_html()
        if verbose and i % 100 == 0:
            print(f"  Test {i}/{num_tests}...")
        try:
            problems = find_violations(html)
        except Exception as e:
            problems = [f"crash: {e}\n{traceback.format_exc()}"]
        if problems:
            failures.append({"test_num": i, "html": html, "problems": problems})
            if verbose:
                print(f"  FAIL: Test {i}: {problems[0]}")

    elapsed_total = time.time() - start_time

    print(f"\n{'='*60}")
    print("FUZZING RESULTS")
    print(f"{'='*60}")
    print(f"Total tests:    {num_tests}")
    print(f"Failures:       {len(failures)}")
    print(f"Total time:     {elapsed_total:.2f}s")
    if elapsed_total:
        print(f"Tests/second:   {num_tests/elapsed_total:.1f}")

    for failure in failures[:10]:
        print(f"\nTest #{failure['test_num']}:")
        print(f"  HTML: {failure['html'][:200]!r}")
        for problem in failure["problems"]:
            print(f"  {problem}")

    if save_failures and failures:
        filename = f"fuzz_failures_{int(time.time())}.txt"
        with open(filename, "w") as f:
            f.write(f"Seed: {seed}\n\n")
            for failure in failures:
                f.write(f"=== FAILURE #{failure['test_num']} ===\n")
                f.write(f"HTML:\n{failure['html']}\n")
                f.write("\n".join(failure["problems"]) + "\n\n")
        print(f"\nFailures saved to {filename}")

    return not failures


def main():
    parser = argparse.ArgumentParser(description="Fuzz the markupguard sanitizer with hostile input")
    parser.add_argument("--num-tests", "-n", type=int, default=1000, help="Number of test cases (default: 1000)")
    parser.add_argument("--seed", "-s", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--save-failures", action="store_true", help="Save failures to a file")
    parser.add_argument("--sample", type=int, metavar="N", help="Just print N sample inputs (no sanitizing)")
    args = parser.parse_args()

    if args.sample:
        if args.seed:
            random.seed(args.seed)
        for i in range(args.sample):
            print(f"=== Sample {i+1} ===")
            print(generate_fuzzed_html())
            print()
        return

    success = run_fuzzer(args.num_tests, seed=args.seed, verbose=args.verbose, save_failures=args.save_failures)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()

"""
Generate a small sample catalog.

This script:
1) Writes a fixed set of movies
2) Writes a handful of users
3) Generates random watch history over the last 90 days (10-50 movies per user)
4) Recomputes each movie's watch count from that history

Usage:
    python -m scripts.generate_sample_data [--seed 42] [--out data]

The API and Streamlit load these files from CATALOG_DATA_DIR (default: data/).
"""

import argparse  # command-line options
import random  # sampled histories
from datetime import datetime, timedelta, timezone  # event timestamps
from pathlib import Path  # filesystem-safe paths

from loguru import logger  # console logging

from catalog.data_loader import MOVIES_FILE, USERS_FILE, WATCH_HISTORY_FILE, write_jsonl  # file layout
from catalog.store import new_id  # record ids

SAMPLE_MOVIES = [
	("The Dark Knight", 2008, ["Action", "Crime", "Drama"], "Christopher Nolan", ["Christian Bale", "Heath Ledger", "Aaron Eckhart"], 9.0),
	("Dark Waters", 2019, ["Drama", "Thriller"], "Todd Haynes", ["Mark Ruffalo", "Anne Hathaway", "Tim Robbins"], 7.6),
	("Inception", 2010, ["Action", "Science Fiction", "Adventure"], "Christopher Nolan", ["Leonardo DiCaprio", "Joseph Gordon-Levitt", "Elliot Page"], 8.8),
	("Interstellar", 2014, ["Adventure", "Drama", "Science Fiction"], "Christopher Nolan", ["Matthew McConaughey", "Anne Hathaway", "Jessica Chastain"], 8.7),
	("The Conjuring", 2013, ["Horror", "Mystery", "Thriller"], "James Wan", ["Vera Farmiga", "Patrick Wilson", "Lili Taylor"], 7.5),
	("Hereditary", 2018, ["Horror", "Mystery", "Drama"], "Ari Aster", ["Toni Collette", "Alex Wolff", "Milly Shapiro"], 7.3),
	("Get Out", 2017, ["Horror", "Mystery", "Thriller"], "Jordan Peele", ["Daniel Kaluuya", "Allison Williams", "Bradley Whitford"], 7.7),
	("Mad Max: Fury Road", 2015, ["Action", "Adventure", "Science Fiction"], "George Miller", ["Tom Hardy", "Charlize Theron", "Nicholas Hoult"], 8.1),
	("John Wick", 2014, ["Action", "Thriller"], "Chad Stahelski", ["Keanu Reeves", "Michael Nyqvist", "Alfie Allen"], 7.4),
	("The Matrix", 1999, ["Action", "Science Fiction"], "Lana Wachowski", ["Keanu Reeves", "Laurence Fishburne", "Carrie-Anne Moss"], 8.7),
	("Superbad", 2007, ["Comedy"], "Greg Mottola", ["Jonah Hill", "Michael Cera", "Christopher Mintz-Plasse"], 7.6),
	("The Grand Budapest Hotel", 2014, ["Comedy", "Drama", "Adventure"], "Wes Anderson", ["Ralph Fiennes", "Tony Revolori", "Saoirse Ronan"], 8.1),
	("La La Land", 2016, ["Comedy", "Drama", "Romance", "Music"], "Damien Chazelle", ["Ryan Gosling", "Emma Stone", "John Legend"], 8.0),
	("Whiplash", 2014, ["Drama", "Music"], "Damien Chazelle", ["Miles Teller", "J.K. Simmons", "Melissa Benoist"], 8.5),
	("Spirited Away", 2001, ["Animation", "Family", "Fantasy"], "Hayao Miyazaki", ["Rumi Hiiragi", "Miyu Irino", "Mari Natsuki"], 8.6),
	("Toy Story", 1995, ["Animation", "Adventure", "Comedy", "Family"], "John Lasseter", ["Tom Hanks", "Tim Allen", "Don Rickles"], 8.3),
	("Forrest Gump", 1994, ["Comedy", "Drama", "Romance"], "Robert Zemeckis", ["Tom Hanks", "Robin Wright", "Gary Sinise"], 8.8),
	("Saving Private Ryan", 1998, ["Drama", "History", "War"], "Steven Spielberg", ["Tom Hanks", "Matt Damon", "Tom Sizemore"], 8.6),
	("Jurassic Park", 1993, ["Adventure", "Science Fiction"], "Steven Spielberg", ["Sam Neill", "Laura Dern", "Jeff Goldblum"], 8.2),
	("Light House", 2019, ["Drama", "Fantasy", "Horror"], "Robert Eggers", ["Robert Pattinson", "Willem Dafoe", "Valeriia Karaman"], 7.0),
]

SAMPLE_USERS = [
	("Alice Johnson", "alice@example.com", "premium"),
	("Bob Smith", "bob@example.com", "free"),
	("Carla Gomez", "carla@example.com", "vip"),
	("Deepak Rao", "deepak@example.com", "free"),
	("Emma Chen", "emma@example.com", "premium"),
]


def build_movies():
	return [
		{
			"id": new_id(),
			"title": title,
			"releaseYear": year,
			"genres": genres,
			"director": director,
			"cast": [{"name": name, "role": "Actor"} for name in cast],
			"rating": rating,
			"watchCount": 0,
			"description": "",
		}
		for title, year, genres, director, cast, rating in SAMPLE_MOVIES
	]


def build_users(now: datetime):
	return [
		{"id": new_id(), "name": name, "email": email, "subscriptionType": sub, "createdAt": now.isoformat()}
		for name, email, sub in SAMPLE_USERS
	]


def build_watch_history(users, movies, now: datetime, rng: random.Random):
	events = []
	for user in users:
		# Each user watches 10-50 movies (bounded by the catalog size)
		count = min(rng.randint(10, 50), len(movies))
		for movie in rng.sample(movies, count):
			events.append({
				"id": new_id(),
				"userId": user["id"],
				"movieId": movie["id"],
				"timestamp": (now - timedelta(days=rng.randint(0, 89))).isoformat(),
				"watchDuration": rng.randint(30, 210),  # minutes
				"completionPercentage": rng.randint(1, 100),
			})
		logger.info(f"[Sample] Generated {count} watch entries for {user['name']}")
	return events


def main():
	parser = argparse.ArgumentParser(description="Generate a sample movie catalog as JSON Lines")
	parser.add_argument("--seed", type=int, default=None, help="random seed for reproducible histories")
	parser.add_argument("--out", default=None, help="output directory (default: <project>/data)")
	args = parser.parse_args()

	# Headline banner for visibility in console
	logger.info("=" * 60)
	logger.info("Generate Sample Catalog")
	logger.info("=" * 60)

	root = Path(__file__).resolve().parents[1]  # project root
	out_dir = Path(args.out) if args.out else root / 'data'  # output directory
	rng = random.Random(args.seed)  # reproducible when seeded
	now = datetime.now(timezone.utc)

	logger.info("[1/4] Building movies and users...")
	movies = build_movies()
	users = build_users(now)

	logger.info("[2/4] Generating watch history...")
	events = build_watch_history(users, movies, now, rng)

	logger.info("[3/4] Updating movie watch counts...")
	counts = {}
	for event in events:
		counts[event["movieId"]] = counts.get(event["movieId"], 0) + 1
	for movie in movies:
		movie["watchCount"] = counts.get(movie["id"], 0)

	logger.info(f"[4/4] Writing files to {out_dir}...")
	write_jsonl(out_dir / MOVIES_FILE, movies)
	write_jsonl(out_dir / USERS_FILE, users)
	write_jsonl(out_dir / WATCH_HISTORY_FILE, events)

	logger.info(f"All done! {len(movies)} movies, {len(users)} users, {len(events)} watch events.")
	logger.info("=" * 60)


if __name__ == '__main__':
	main()  # invoke generator

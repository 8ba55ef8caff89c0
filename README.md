# jobcrawl

jobcrawl searches four Korean job boards for Go job postings: Saramin,
JobKorea, Incruit and InThisWork. It stores postings it has not seen before
in a MySQL database and mails a digest of the new ones.

## Installation

```
pip install .
```

With the test dependencies:

```
pip install .[test]
pytest
```

## Configuration

The configuration is read from `config/config.<env>.yml`, relative to the
current working directory. `<env>` is the value of the `APP_ENV`
environment variable, or `local` when it is unset or empty.

```yaml
db:
  user: user
  password: password
  url: user:password@tcp(localhost:3306)/jobs?charset=utf8mb4
mail:
  smtp_host: smtp.example.com
  smtp_port: "587"
  sender: sender@example.com
  password: password
  receiver: receiver@example.com
```

Missing keys are read as empty strings. Only `db.url` is used to connect.
It has the form `user:password@network(address)/dbname?params`:

- `network` is `tcp` (the default, with `address` as `host:port`, port 3306
  by default) or `unix` (with `address` as the socket path).
- Of the parameters, only `charset` is used.

`mail.smtp_port` must be a number. The mail is sent from `mail.sender` to
`mail.receiver`. The sender logs in with `mail.password`, and the session
is upgraded with STARTTLS when the server offers it.

When `APP_ENV` is `aws_lambda`, the database password is fetched from AWS
Secrets Manager in region `ap-northeast-2`. The secret is named by the
`RDS_SECRET_NAME` environment variable, and its JSON `password` member
replaces the `<password>` placeholder in `db.url`. The request is signed
with the credentials in `AWS_ACCESS_KEY_ID`, `AWS_SECRET_ACCESS_KEY` and,
if set, `AWS_SESSION_TOKEN`.

The database needs two tables:

- `sites`: `id`, `name`, `created_at` and `updated_at`. `name` must be
  unique, because a site is inserted with `ON DUPLICATE KEY UPDATE`.
- `posts`: `post_id`, `url`, `title`, `company_name`, `site_id`,
  `created_at` and `updated_at`.

## Usage

```
jobcrawl
```

Each run does the following:

1. It crawls the four boards at the same time. Each board is read page by
   page until it reports no more results, or until a page cannot be
   fetched.
2. It inserts the site names that are not yet in `sites`.
3. It keeps the postings whose IDs are not yet stored for their site and
   inserts them in one transaction.
4. It mails the new postings, sorted and grouped by site name. The subject
   has the form `JobGo Finds New JobPosts! [YYYY-MM-DD HH:MM]`.

If there are no new postings, no mail is sent and `No posts found` is
printed. The command exits with status 1 if the configuration cannot be
read or the database cannot be reached, and with 0 otherwise. Progress is
logged at INFO level.

## Library use

```python
from jobcrawl.crawl_service import CrawlService
from jobcrawl.crawlers import JobKoreaCrawler, SaraminCrawler

posts = CrawlService(SaraminCrawler(), JobKoreaCrawler()).crawl()
for post in posts:
    print(post.site_name, post.company_name, post.title, post.url)
```

- `jobcrawl.crawlers`: `SaraminCrawler`, `JobKoreaCrawler`,
  `IncruitCrawler` and `InThisWorkCrawler` each take an optional
  `requests.Session`. `parse_page(html)` returns the postings on one page
  and whether it is the last page, without any network access.
  `page_url(index)` builds the URL of the page numbered from 1.
- `jobcrawl.crawl_service`: `CrawlService(*crawlers).crawl()` runs the
  crawlers in threads. A crawler that raises contributes no postings.
- `jobcrawl.models`: `PostRequest` (keyed by site name), `PostInsert`
  (keyed by site id) and `Site`. Each of the two post types converts to the
  other.
- `jobcrawl.config`: `load_config(env, base_dir)` and `parse_config(data)`.
- `jobcrawl.database`: `initialize(cfg)` opens a checked connection.
  `parse_dsn(dsn)`, `extract_password(secret_json)` and
  `get_rds_secret(session)` are also available.
- `jobcrawl.repositories`: `PostRepository` and `SiteRepository` work on any
  DB-API connection that uses `%s` parameters.
- `jobcrawl.post_service`: `PostService.create_new_posts(posts)`.
- `jobcrawl.mail_service`: `MailService(posts, config)` has
  `build_message(now)` and `send_mail()`. Both raise `NoPostsError` when
  there are no posts.

## Limitations

- The tables are not created; they must exist before the first run.
- AWS credentials are read only from the environment variables listed
  above. Profiles, configuration files and instance roles are not used.
- The search terms and boards are fixed in the crawler classes.